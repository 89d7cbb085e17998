# config.py — environment-driven settings and logging setup
import os
import logging
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
RAW_LOGGER_NAME = "healthmate.llm_raw"


class Settings(BaseModel):
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-flash"
    gemini_base_url: str = GEMINI_OPENAI_BASE_URL
    google_places_api_key: Optional[str] = None
    history_db_path: str = "history.db"
    llm_raw_log: Optional[str] = "llm_raw_logs.txt"
    auth_jwt_secret: Optional[str] = None
    model_timeout_secs: float = 30.0
    places_timeout_secs: float = 10.0
    log_level: str = "INFO"
    api_url: str = "http://127.0.0.1:5000"


def _env(name: str) -> Optional[str]:
    # blank values count as unset
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_settings() -> Settings:
    """Build Settings from the environment (.env.local, then .env)."""
    load_dotenv(".env.local")
    load_dotenv(".env")

    values = {
        "gemini_api_key": _env("GEMINI_API_KEY"),
        "gemini_model": _env("GEMINI_MODEL"),
        "gemini_base_url": _env("GEMINI_BASE_URL"),
        "google_places_api_key": _env("GOOGLE_PLACES_API_KEY"),
        "history_db_path": _env("HISTORY_DB_PATH"),
        "llm_raw_log": _env("LLM_RAW_LOG"),
        "auth_jwt_secret": _env("AUTH_JWT_SECRET"),
        "model_timeout_secs": _env("MODEL_TIMEOUT_SECS"),
        "places_timeout_secs": _env("PLACES_TIMEOUT_SECS"),
        "log_level": _env("LOG_LEVEL"),
        "api_url": _env("HEALTHMATE_API_URL"),
    }
    return Settings(**{k: v for k, v in values.items() if v is not None})


def configure_logging(settings: Settings) -> None:
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Raw model completions go to their own file for debugging
    raw_logger = logging.getLogger(RAW_LOGGER_NAME)
    raw_logger.setLevel(logging.INFO)
    raw_logger.propagate = False
    if not settings.llm_raw_log or raw_logger.handlers:
        return
    try:
        d = os.path.dirname(settings.llm_raw_log)
        if d and not os.path.exists(d):
            os.makedirs(d, exist_ok=True)
        handler = logging.FileHandler(settings.llm_raw_log, encoding="utf-8")
    except OSError as e:
        logging.getLogger(__name__).warning("Raw LLM log disabled: %s", e)
        return
    handler.setFormatter(logging.Formatter("%(message)s"))
    raw_logger.addHandler(handler)
