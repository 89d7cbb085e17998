# app.py — Flask backend
import logging

from flask import Flask, current_app, jsonify, request
from flask_cors import CORS
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from auth import get_current_user_id
from config import Settings, configure_logging, load_settings
from errors import HealthMateError, InvalidRequestError, ModelError
from history_store import HistoryStore
from llm_wrapper import GeminiClient
from places_service import PlacesClient, find_health_resources, geocode_address
from pydantic_models import ChatRequest, Location, SymptomReport
from symptom_service import analyze_symptoms, health_chat

logger = logging.getLogger(__name__)

CORS_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]
ANALYZE_FAILED = ("Failed to analyze symptoms. Please try again later or consult with a "
                  "healthcare professional for immediate concerns.")
CHAT_FAILED = ("Failed to process your request. Please try again later or consult with a "
               "healthcare professional for immediate concerns.")
INTERNAL_ERROR = ("Something went wrong. Please try again later or consult with a "
                  "healthcare professional for immediate concerns.")


def _services():
    return current_app.extensions["healthmate"]


def _parse_body(model_cls):
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        raise InvalidRequestError("Please POST a JSON object.", "Request body is not a JSON object")
    try:
        return model_cls(**data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ()))
        msg = first.get("msg", "invalid value").removeprefix("Value error, ")
        detail = f"{field}: {msg}" if field else msg
        raise InvalidRequestError(f"Invalid request: {detail}", detail) from e


def create_app(settings: Settings = None, model_client=None, places_client=None, history_store=None):
    settings = settings or load_settings()
    configure_logging(settings)

    app = Flask(__name__)
    app.config["AUTH_JWT_SECRET"] = settings.auth_jwt_secret
    CORS(app, origins="*", send_wildcard=True, allow_headers=CORS_HEADERS)

    if places_client is None and settings.google_places_api_key:
        places_client = PlacesClient(settings.google_places_api_key, settings.places_timeout_secs)
    app.extensions["healthmate"] = {
        "model": model_client or GeminiClient.from_settings(settings),
        "places": places_client,
        "history": history_store or HistoryStore(settings.history_db_path),
    }

    @app.errorhandler(HealthMateError)
    def handle_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return e
        logger.exception("Unhandled error in %s", request.path)
        return jsonify({"error": INTERNAL_ERROR, "details": str(e)}), 500

    @app.route("/", methods=["GET"])
    def index():
        return "HealthMate API — POST /api/symptom-analyzer with {'symptoms':'...'}"

    @app.route("/api/symptom-analyzer", methods=["POST"])
    def symptom_analyzer():
        report = _parse_body(SymptomReport)
        services = _services()
        user_id = get_current_user_id() if report.saveToHistory else None
        try:
            result = analyze_symptoms(report, services["model"], services["places"],
                                      services["history"], user_id)
        except ModelError as e:
            logger.error("Error in symptom analyzer: %s (%s)", e.message, e.details)
            return jsonify({"error": ANALYZE_FAILED, "details": e.message}), e.status_code
        return jsonify(result.model_dump(exclude_none=True))

    @app.route("/api/health-chat", methods=["POST"])
    def chat():
        chat_request = _parse_body(ChatRequest)
        try:
            reply = health_chat(chat_request, _services()["model"])
        except ModelError as e:
            logger.error("Error in health chat: %s (%s)", e.message, e.details)
            return jsonify({"error": CHAT_FAILED, "details": e.message}), e.status_code
        return jsonify(reply.model_dump())

    @app.route("/api/health-resources", methods=["GET"])
    def health_resources():
        try:
            location = Location(lat=request.args.get("lat"), lng=request.args.get("lng"))
        except ValidationError as e:
            raise InvalidRequestError("Query parameters lat and lng are required numbers", str(e)) from e
        kind = request.args.get("type", "hospital")
        resources = find_health_resources(location, kind, _services()["places"])
        return jsonify({"resources": [r.model_dump() for r in resources]})

    @app.route("/api/geocode", methods=["GET"])
    def geocode():
        address = request.args.get("address", "")
        if not address.strip():
            raise InvalidRequestError("Query parameter address is required")
        location = geocode_address(address, _services()["places"])
        if location is None:
            raise HealthMateError("Address not found", f"Could not geocode {address!r}", status_code=404)
        return jsonify(location.model_dump())

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000)
