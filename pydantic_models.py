from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Literal, Optional

Severity = Literal["mild", "moderate", "severe"]
UrgencyLevel = Literal["low", "medium", "high"]
Category = Literal[
    "cardiology", "neurology", "orthopedics", "gastroenterology", "dermatology",
    "pulmonology", "mental-health", "pediatrics", "gynecology", "emergency",
]


class Location(BaseModel):
    lat: float = Field(ge=-90, le=90, allow_inf_nan=False)
    lng: float = Field(ge=-180, le=180, allow_inf_nan=False)


class SymptomReport(BaseModel):
    symptoms: str
    userLocation: Optional[Location] = None
    saveToHistory: bool = False

    @field_validator("symptoms")
    @classmethod
    def symptoms_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Symptoms description is required")
        return v


class ConditionAssessment(BaseModel):
    severity: Severity = "mild"
    categories: List[Category] = Field(default_factory=list)


class AnalysisFields(BaseModel):
    """The structured record requested from the model."""
    severity: Severity
    healthInsights: str
    possibleCauses: List[str]
    recommendedActions: List[str]
    homeRemedies: List[str]
    seekCare: str
    urgencyLevel: UrgencyLevel


class FacilityDescriptor(BaseModel):
    name: str
    type: str
    address: str
    distance: str
    specialty: Optional[str] = None
    phoneNumber: Optional[str] = None


class AnalysisResult(AnalysisFields):
    nearbyFacilities: List[FacilityDescriptor] = Field(default_factory=list, max_length=4)
    hasLocationSuggestions: bool = False
    timestamp: str


class ChatRequest(BaseModel):
    message: str
    userLocation: Optional[Location] = None

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message is required")
        return v


class ChatReply(BaseModel):
    response: str
    healthConditions: List[str]
    hasLocationSuggestions: bool


class HealthResource(BaseModel):
    name: str
    type: Literal["clinic", "pharmacy", "mental-health", "emergency"]
    category: str
    address: str
    phone: str
    hours: str
    rating: float = 0.0
    isOpen: bool = False
    distance: str
    services: List[str]
    lat: float
    lng: float


class HistoryRecord(BaseModel):
    userId: str
    symptoms: str
    analysisResult: Dict[str, Any]
    locationData: Optional[Dict[str, Any]] = None
