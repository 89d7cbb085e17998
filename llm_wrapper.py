"""
Generative-model glue for the HealthMate symptom service.

Provides:
- build_prompt / build_chat_prompt: fixed instruction templates
- ModelClient: the narrow contract the services call (complete(prompt) -> text)
- GeminiClient: ModelClient backed by Gemini's OpenAI-compatible endpoint
- parse_analysis: robust JSON extraction with a canned fallback record
"""

import json
import re
import logging
from abc import ABC, abstractmethod
from typing import Optional

from openai import OpenAI, OpenAIError, APIStatusError
from config import RAW_LOGGER_NAME, Settings
from errors import ModelError
from pydantic_models import AnalysisFields

logger = logging.getLogger(__name__)
raw_logger = logging.getLogger(RAW_LOGGER_NAME)

ANALYSIS_GENERATION = {"temperature": 0.3, "top_p": 0.95, "max_tokens": 2048}
CHAT_GENERATION = {"temperature": 0.7, "top_p": 0.95, "max_tokens": 1024}

# PROMPT_TEMPLATE: literal with a {symptoms} placeholder, filled with replace (not .format)
PROMPT_TEMPLATE = """You are an AI health assistant providing symptom analysis. Analyze the following symptoms and provide a structured response:

Symptoms: "{symptoms}"

Please provide your response in the following JSON format:
{
  "severity": "mild|moderate|severe",
  "healthInsights": "Brief explanation of possible health conditions related to the symptoms",
  "possibleCauses": ["cause 1", "cause 2", "cause 3"],
  "recommendedActions": ["action 1", "action 2", "action 3"],
  "homeRemedies": ["remedy 1", "remedy 2", "remedy 3"],
  "seekCare": "When to seek medical care description",
  "urgencyLevel": "low|medium|high"
}

Guidelines:
- Be medically accurate but general in nature
- Focus on common conditions for the described symptoms
- Provide practical, safe home remedies for minor conditions
- Be clear about when professional medical care is needed
- Include appropriate medical disclaimers in your recommendations
- Severity should be based on symptom description and potential conditions"""

CHAT_PROMPT_TEMPLATE = """You are a helpful AI health companion. Provide supportive, informative responses about health and wellness. Be empathetic and understanding. Always include medical disclaimers and encourage professional medical consultation for serious concerns.

User message: "{message}"

Guidelines:
- Be compassionate and understanding
- Provide general health information only
- Always recommend consulting healthcare professionals
- Include relevant medical disclaimers
- If symptoms are mentioned, suggest appropriate types of healthcare providers"""

FALLBACK_INSIGHTS = (
    "I'm experiencing some difficulty analyzing your symptoms right now. "
    "Please consult with a healthcare professional for proper evaluation."
)

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)```", re.IGNORECASE)
_BRACE_SPAN = re.compile(r"\{[\s\S]*\}")


def build_prompt(raw_text: str) -> str:
    return PROMPT_TEMPLATE.replace("{symptoms}", raw_text)


def build_chat_prompt(message: str) -> str:
    return CHAT_PROMPT_TEMPLATE.replace("{message}", message)


class ModelClient(ABC):
    """Anything that turns a prompt into completion text."""

    @abstractmethod
    def complete(self, prompt: str, temperature: float = 0.3, top_p: float = 0.95,
                 max_tokens: int = 2048) -> str:
        raise NotImplementedError


class GeminiClient(ModelClient):
    def __init__(self, api_key: Optional[str], model: str, base_url: str, timeout_secs: float = 30.0):
        self.model = model
        self._client = None
        if api_key:
            # single attempt per call
            self._client = OpenAI(api_key=api_key, base_url=base_url,
                                  timeout=timeout_secs, max_retries=0)

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiClient":
        return cls(settings.gemini_api_key, settings.gemini_model,
                   settings.gemini_base_url, settings.model_timeout_secs)

    def complete(self, prompt: str, temperature: float = 0.3, top_p: float = 0.95,
                 max_tokens: int = 2048) -> str:
        if self._client is None:
            raise ModelError("Gemini API key not configured")
        try:
            resp = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                top_p=top_p,
                max_tokens=max_tokens,
            )
        except APIStatusError as e:
            raw_logger.info("----ERROR----\n%s", e)
            raise ModelError(f"Gemini API error: {e.status_code}", str(e)) from e
        except OpenAIError as e:
            raw_logger.info("----ERROR----\n%s", e)
            raise ModelError("Gemini API request failed", str(e)) from e

        text = ""
        if resp.choices:
            text = resp.choices[0].message.content or ""
        raw_logger.info("----CALL----\n%s", text)
        return text


def fallback_analysis(severity: str) -> AnalysisFields:
    return AnalysisFields(
        severity=severity,
        healthInsights=FALLBACK_INSIGHTS,
        possibleCauses=["Unable to determine at this time"],
        recommendedActions=["Consult with a healthcare provider", "Monitor your symptoms", "Rest and stay hydrated"],
        homeRemedies=["Ensure adequate rest", "Stay well hydrated", "Maintain a healthy diet"],
        seekCare="Consult a healthcare provider if symptoms persist or worsen",
        urgencyLevel="medium",
    )


def extract_json_candidate(raw_text: str) -> str:
    """Fenced ```json block first, then the outermost {...} span, else the text itself."""
    m = _FENCED_JSON.search(raw_text)
    if m:
        return m.group(1).strip()
    m = _BRACE_SPAN.search(raw_text)
    if m:
        return m.group(0)
    return raw_text.strip()


def parse_analysis(model_text: str, fallback_severity: str) -> AnalysisFields:
    """
    Turn a model reply into AnalysisFields. Never raises: anything that is not
    a JSON object with valid enum values yields the canned fallback record.
    Keys the model left out are filled from the fallback record.
    """
    fallback = fallback_analysis(fallback_severity)
    try:
        parsed = json.loads(extract_json_candidate(model_text or ""))
        if not isinstance(parsed, dict):
            raise ValueError("model reply is not a JSON object")
        for key in ("severity", "urgencyLevel"):
            if isinstance(parsed.get(key), str):
                parsed[key] = parsed[key].strip().lower()
        merged = {**fallback.model_dump(), **{k: v for k, v in parsed.items() if v is not None}}
        return AnalysisFields(**merged)
    except Exception as e:
        # includes RecursionError from deeply nested replies
        logger.warning("Failed to parse model response as JSON: %s", e)
        return fallback
