"""
Request orchestration:
- analyze_symptoms: classify -> prompt -> model -> parse -> facilities -> history
- health_chat: companion reply with facility suggestions and a disclaimer
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from history_store import HistoryStore
from llm_wrapper import (ANALYSIS_GENERATION, CHAT_GENERATION, ModelClient,
                         build_chat_prompt, build_prompt, parse_analysis)
from places_service import PlacesClient, chat_suggestions, format_chat_suggestions, match_facilities
from pydantic_models import AnalysisResult, ChatReply, ChatRequest, HistoryRecord, SymptomReport
from rule_based import classify, detect_health_conditions

logger = logging.getLogger(__name__)

CHAT_UNAVAILABLE = "I'm sorry, I couldn't process your request at the moment."
DISCLAIMER = (
    "\n\n⚠️ **Medical Disclaimer**: This information is for general guidance only and should not "
    "replace professional medical advice. Please consult with a healthcare provider for proper "
    "diagnosis and treatment."
)


def _utc_timestamp():
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def analyze_symptoms(report: SymptomReport, model_client: ModelClient,
                     places_client: Optional[PlacesClient] = None,
                     history_store: Optional[HistoryStore] = None,
                     user_id: Optional[str] = None) -> AnalysisResult:
    """
    Full symptom analysis. Raises ModelError when the model call itself fails;
    malformed replies, facility lookups and history writes are recovered here.
    """
    logger.info("Analyzing symptoms (%d chars)", len(report.symptoms))
    assessment = classify(report.symptoms)

    raw = model_client.complete(build_prompt(report.symptoms), **ANALYSIS_GENERATION)
    fields = parse_analysis(raw, assessment.severity)

    facilities = []
    if report.userLocation is not None and assessment.categories:
        facilities = match_facilities(report.userLocation, assessment.categories,
                                      fields.urgencyLevel, places_client)

    if report.saveToHistory:
        _save_history(history_store, user_id, report, fields, facilities)

    return AnalysisResult(
        **fields.model_dump(),
        nearbyFacilities=facilities,
        hasLocationSuggestions=len(facilities) > 0,
        timestamp=_utc_timestamp(),
    )


def _save_history(history_store, user_id, report, fields, facilities):
    if history_store is None or not user_id:
        logger.info("History not saved: no store or anonymous user")
        return
    location_data = None
    if report.userLocation is not None:
        location_data = {
            "coordinates": report.userLocation.model_dump(),
            "facilities": [f.model_dump(exclude_none=True) for f in facilities],
        }
    try:
        history_store.save(HistoryRecord(
            userId=user_id,
            symptoms=report.symptoms,
            analysisResult=fields.model_dump(),
            locationData=location_data,
        ))
    except Exception:
        # best-effort
        logger.exception("Failed to save to history")


def health_chat(chat: ChatRequest, model_client: ModelClient) -> ChatReply:
    conditions = detect_health_conditions(chat.message)

    reply = model_client.complete(build_chat_prompt(chat.message), **CHAT_GENERATION)
    reply = reply or CHAT_UNAVAILABLE

    with_location = chat.userLocation is not None and len(conditions) > 0
    if with_location:
        reply += format_chat_suggestions(chat_suggestions(conditions))

    reply += DISCLAIMER
    return ChatReply(response=reply, healthConditions=conditions, hasLocationSuggestions=with_location)
