"""Fake collaborators implementing the narrow client contracts."""
import json

from errors import ModelError, PlacesError
from llm_wrapper import ModelClient

GOOD_REPLY = {
    "severity": "moderate",
    "healthInsights": "Likely a viral infection.",
    "possibleCauses": ["Common cold", "Influenza"],
    "recommendedActions": ["Rest", "Drink fluids"],
    "homeRemedies": ["Warm tea with honey"],
    "seekCare": "If fever lasts more than three days.",
    "urgencyLevel": "low",
}


class FakeModel(ModelClient):
    def __init__(self, reply=None, error=None):
        self.reply = json.dumps(GOOD_REPLY) if reply is None else reply
        self.error = error
        self.calls = []

    def complete(self, prompt, temperature=0.3, top_p=0.95, max_tokens=2048):
        self.calls.append({"prompt": prompt, "temperature": temperature,
                           "top_p": top_p, "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        return self.reply


def failing_model():
    return FakeModel(error=ModelError("Gemini API error: 503", "service unavailable"))


def place(name, lat, lng, types=("hospital",), **extra):
    record = {"name": name, "vicinity": f"{name} Road",
              "geometry": {"location": {"lat": lat, "lng": lng}}, "types": None if types is None else list(types)}
    record.update(extra)
    return record


class FakePlaces:
    def __init__(self, results_by_type=None, fail_types=(), geocoded=None):
        self.results_by_type = results_by_type or {}
        self.fail_types = set(fail_types)
        self.geocoded = geocoded or {}
        self.searches = []

    def nearby_search(self, lat, lng, radius, place_type, keyword=None):
        self.searches.append({"type": place_type, "radius": radius, "keyword": keyword})
        if place_type in self.fail_types:
            raise PlacesError("Places API status OVER_QUERY_LIMIT")
        return self.results_by_type.get(place_type, [])

    def geocode(self, address):
        if address not in self.geocoded:
            return None
        return self.geocoded[address]


class FailingHistory:
    def __init__(self):
        self.attempts = 0

    def save(self, record):
        self.attempts += 1
        raise RuntimeError("database is locked")


class RecordingHistory:
    def __init__(self):
        self.records = []

    def save(self, record):
        self.records.append(record)
        return len(self.records)
