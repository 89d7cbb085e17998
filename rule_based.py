import re

from pydantic_models import ConditionAssessment

# Severity tiers, checked in this order; the first tier that hits wins
EMERGENCY_KEYWORDS = (
    "severe chest pain", "heart attack", "can't breathe", "difficulty breathing",
    "severe bleeding", "unconscious", "stroke", "severe head injury", "poisoning",
    "severe allergic reaction", "anaphylaxis", "severe burns", "seizure",
)

SEVERE_KEYWORDS = (
    "severe pain", "high fever", "vomiting blood", "severe headache",
    "severe abdominal pain", "severe dizziness", "fainting", "severe nausea",
)

MODERATE_KEYWORDS = (
    "persistent pain", "fever", "persistent cough", "moderate pain",
    "swelling", "rash", "persistent nausea", "headache",
)

SPECIALTY_KEYWORDS = {
    "cardiology": ("chest pain", "heart", "palpitations", "shortness of breath", "cardiac"),
    "neurology": ("headache", "migraine", "dizziness", "numbness", "neurological", "seizure"),
    "orthopedics": ("joint pain", "back pain", "bone pain", "arthritis", "sprain", "fracture"),
    "gastroenterology": ("stomach pain", "nausea", "vomiting", "diarrhea", "abdominal", "digestive"),
    "dermatology": ("skin", "rash", "acne", "eczema", "itching", "dermatological"),
    "pulmonology": ("cough", "breathing", "asthma", "lung", "respiratory", "wheezing"),
    "mental-health": ("anxiety", "depression", "stress", "panic", "mental health", "mood"),
    "pediatrics": ("child", "baby", "infant", "kids", "pediatric"),
    "gynecology": ("pregnancy", "menstrual", "reproductive", "gynecological"),
}

# The chat companion uses a slightly different table, with its own emergency entry
CHAT_CONDITION_KEYWORDS = {
    "cardiology": ("chest pain", "heart pain", "palpitations", "shortness of breath", "heart attack", "cardiac"),
    "emergency": ("severe pain", "emergency", "urgent", "accident", "trauma", "unconscious", "bleeding heavily"),
    "orthopedics": ("bone pain", "fracture", "joint pain", "back pain", "arthritis", "sprain"),
    "neurology": ("headache", "migraine", "seizure", "numbness", "dizziness", "neurological"),
    "gastroenterology": ("stomach pain", "nausea", "vomiting", "diarrhea", "digestive", "abdominal"),
    "dermatology": ("skin rash", "acne", "eczema", "skin condition", "dermatological"),
    "pulmonology": ("breathing problems", "asthma", "cough", "lung", "respiratory"),
    "mental-health": ("depression", "anxiety", "stress", "mental health", "psychological", "therapy"),
    "pediatrics": ("child", "baby", "infant", "pediatric", "kids"),
    "gynecology": ("pregnancy", "menstrual", "reproductive", "gynecological"),
}


def normalize_text(text):
    text = (text or "").lower()
    # curly apostrophes from mobile keyboards ("can’t breathe")
    text = re.sub(r"[‘’]", "'", text)
    return text.strip()


def _any_hit(text, keywords):
    return any(k in text for k in keywords)


def _matching_categories(text, table):
    return [category for category, keywords in table.items() if _any_hit(text, keywords)]


def classify(raw_text: str) -> ConditionAssessment:
    text = normalize_text(raw_text)
    categories = []

    if _any_hit(text, EMERGENCY_KEYWORDS):
        severity = "severe"
        categories.append("emergency")
    elif _any_hit(text, SEVERE_KEYWORDS):
        severity = "severe"
    elif _any_hit(text, MODERATE_KEYWORDS):
        severity = "moderate"
    else:
        severity = "mild"

    for category in _matching_categories(text, SPECIALTY_KEYWORDS):
        if category not in categories:
            categories.append(category)

    return ConditionAssessment(severity=severity, categories=categories)


def detect_health_conditions(message: str):
    """Categories mentioned in a free-form chat message, in table order."""
    return _matching_categories(normalize_text(message), CHAT_CONDITION_KEYWORDS)
