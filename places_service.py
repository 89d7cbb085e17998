"""
Nearby healthcare facility lookup.

match_facilities() prefers live Google Places results and falls back to a
small region-aware mock table; it never raises to its caller.
"""

import math
import logging
from typing import List, Optional

import requests

from errors import PlacesError
from pydantic_models import FacilityDescriptor, HealthResource, Location

logger = logging.getLogger(__name__)

NEARBY_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"
GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
EARTH_RADIUS_KM = 6371.0

MAX_FACILITIES = 4
MAX_MOCK_FACILITIES = 3
RESULTS_PER_SEARCH = 3
MAX_SEARCHES = 2


class PlacesClient:
    """Thin wrapper over the Places nearby-search and Geocoding REST APIs."""

    def __init__(self, api_key: str, timeout_secs: float = 10.0, session=None):
        self.api_key = api_key
        self.timeout_secs = timeout_secs
        self.session = session or requests.Session()

    def _get(self, url, params):
        params = dict(params, key=self.api_key)
        try:
            response = self.session.get(url, params=params, timeout=self.timeout_secs)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise PlacesError("Places request failed", str(e)) from e
        except ValueError as e:
            raise PlacesError("Places response was not JSON", str(e)) from e
        status = data.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            raise PlacesError(f"Places API status {status}", data.get("error_message", ""))
        return data

    def nearby_search(self, lat, lng, radius, place_type, keyword=None):
        params = {"location": f"{lat},{lng}", "radius": radius, "type": place_type}
        if keyword:
            params["keyword"] = keyword
        return self._get(NEARBY_SEARCH_URL, params).get("results", [])

    def geocode(self, address: str) -> Optional[Location]:
        results = self._get(GEOCODE_URL, {"address": address}).get("results", [])
        if not results:
            return None
        loc = results[0]["geometry"]["location"]
        return Location(lat=loc["lat"], lng=loc["lng"])


def haversine_km(lat1, lng1, lat2, lng2):
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2)
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def specialty_from_categories(categories):
    if "cardiology" in categories:
        return "Cardiovascular Medicine"
    if "emergency" in categories:
        return "24/7 Emergency Care"
    if "mental-health" in categories:
        return "Mental Health & Counseling"
    if "dermatology" in categories:
        return "Dermatological Care"
    if "orthopedics" in categories:
        return "Orthopedic Medicine"
    return "General Medicine"


def _wants_emergency(categories, urgency_level):
    return urgency_level == "high" or "emergency" in categories


def search_types(categories, urgency_level):
    types = []
    if _wants_emergency(categories, urgency_level):
        types.append("hospital")
    if "dermatology" in categories and "cardiology" not in categories and "mental-health" not in categories:
        types.extend(["doctor", "hospital"])
    else:
        types.extend(["hospital", "doctor"])
    return types[:MAX_SEARCHES]


def _place_to_facility(place, origin: Location, categories) -> FacilityDescriptor:
    loc = place["geometry"]["location"]
    distance = haversine_km(origin.lat, origin.lng, loc["lat"], loc["lng"])
    return FacilityDescriptor(
        name=place.get("name", "Unknown"),
        type="Hospital" if "hospital" in (place.get("types") or []) else "Medical Clinic",
        address=place.get("vicinity") or place.get("formatted_address") or "Address not available",
        distance=f"{distance:.1f} km",
        specialty=specialty_from_categories(categories),
        phoneNumber=place.get("formatted_phone_number") or "Call for information",
    )


def _live_facilities(places_client: PlacesClient, location: Location, categories, urgency_level):
    facilities = []
    radius = 5000 if urgency_level == "high" else 10000
    for place_type in search_types(categories, urgency_level):
        keyword = "hospital emergency" if place_type == "hospital" else "clinic doctor"
        try:
            results = places_client.nearby_search(location.lat, location.lng, radius, place_type, keyword)
            for place in results[:RESULTS_PER_SEARCH]:
                facilities.append(_place_to_facility(place, location, categories))
        except (PlacesError, KeyError, TypeError, ValueError) as e:
            # one failed search must not abort the other
            logger.error("Error searching for %s: %s", place_type, e)
    return facilities


def _region(location: Location):
    # coarse placeholder boxes; they overlap, India wins
    if 8 <= location.lat <= 37 and 68 <= location.lng <= 97:
        return "india"
    if 25 <= location.lat <= 49 and -125 <= location.lng <= -66:
        return "usa"
    return None


def mock_facilities(location: Location, categories, urgency_level) -> List[FacilityDescriptor]:
    is_india = _region(location) == "india"
    facilities = []

    if _wants_emergency(categories, urgency_level):
        facilities.append(FacilityDescriptor(
            name="City Emergency Hospital" if is_india else "Emergency Medical Center",
            type="Emergency Room",
            address="Main Road, City Center" if is_india else "123 Emergency Ave",
            distance="0.8 km",
            specialty="24/7 Emergency Care",
            phoneNumber="102" if is_india else "911",
        ))

    if "cardiology" in categories:
        facilities.append(FacilityDescriptor(
            name="Heart Care Specialty Hospital" if is_india else "Cardiovascular Institute",
            type="Cardiology Hospital",
            address="Medical District, Near Railway Station" if is_india else "456 Cardiac St",
            distance="1.2 km",
            specialty="Cardiovascular Medicine",
            phoneNumber="+91-xxx-xxx-xxxx" if is_india else "(555) 123-4567",
        ))

    facilities.append(FacilityDescriptor(
        name="General District Hospital" if is_india else "Community Medical Center",
        type="General Hospital",
        address="Hospital Road, Medical Complex" if is_india else "321 Health Blvd",
        distance="1.5 km",
        specialty="General Medicine",
        phoneNumber="+91-xxx-xxx-xxxx" if is_india else "(555) 567-8901",
    ))

    return facilities[:MAX_MOCK_FACILITIES]


def match_facilities(location: Optional[Location], categories, urgency_level,
                     places_client: Optional[PlacesClient] = None) -> List[FacilityDescriptor]:
    if location is None:
        return []

    if places_client is None:
        logger.info("Google Places API key not configured, using location-aware mock data")
        return mock_facilities(location, categories, urgency_level)

    try:
        facilities = _live_facilities(places_client, location, categories, urgency_level)
    except Exception as e:
        logger.error("Error fetching location-based facilities: %s", e)
        facilities = []

    if facilities:
        return facilities[:MAX_FACILITIES]
    return mock_facilities(location, categories, urgency_level)


# --- chat companion suggestions ---

def chat_suggestions(categories) -> List[FacilityDescriptor]:
    suggestions = []
    if "emergency" in categories:
        suggestions.append(FacilityDescriptor(
            name="City Emergency Hospital", type="Emergency Room",
            address="123 Emergency Ave", distance="0.8 km", specialty="24/7 Emergency Care"))
    if "cardiology" in categories:
        suggestions.append(FacilityDescriptor(
            name="Heart Care Medical Center", type="Cardiology Clinic",
            address="456 Cardiac St", distance="1.2 km", specialty="Cardiovascular Medicine"))
    if "mental-health" in categories:
        suggestions.append(FacilityDescriptor(
            name="Wellness Mental Health Center", type="Mental Health Clinic",
            address="789 Therapy Lane", distance="1.5 km", specialty="Counseling & Therapy"))
    if not suggestions:
        suggestions.append(FacilityDescriptor(
            name="General Medical Hospital", type="General Hospital",
            address="321 Health Blvd", distance="1.0 km", specialty="General Medicine"))
    return suggestions[:3]


def format_chat_suggestions(suggestions) -> str:
    lines = [
        "\n\n## 🏥 Nearby Healthcare Facilities\n",
        "Based on your location and symptoms, here are some nearby healthcare options:\n",
    ]
    for i, facility in enumerate(suggestions, start=1):
        lines.append(f"**{i}. {facility.name}**")
        lines.append(f"   📍 {facility.address}")
        lines.append(f"   🚗 {facility.distance}")
        if facility.specialty:
            lines.append(f"   🏥 Specializes in: {facility.specialty}")
        lines.append("")
    lines.append("💡 **Recommendation**: Call ahead to check availability and whether "
                 "they can address your specific needs.")
    return "\n".join(lines) + "\n"


# --- health resources locator ---

RESOURCE_PLACE_TYPES = {
    "hospital": "hospital",
    "pharmacy": "pharmacy",
    "dentist": "dentist",
    "physiotherapist": "physiotherapist",
}

SAMPLE_RESOURCES = {
    "hospital": [
        ("City General Hospital", ["General Medicine", "Emergency Care"], 4.2),
        ("Memorial Medical Center", ["Specialist Care", "Surgery"], 4.5),
        ("Regional Health Center", ["Outpatient Care", "Diagnostics"], 4.1),
    ],
    "pharmacy": [
        ("HealthPlus Pharmacy", ["Prescription Filling", "Medical Supplies"], 4.3),
        ("MediCare Drug Store", ["24/7 Service", "Home Delivery"], 4.0),
        ("Wellness Pharmacy", ["Consultation", "Health Screening"], 4.4),
    ],
    "dentist": [
        ("Bright Smile Dental Clinic", ["General Dentistry", "Cosmetic Procedures"], 4.6),
        ("Family Dental Care", ["Pediatric Dentistry", "Orthodontics"], 4.3),
        ("Advanced Dental Center", ["Oral Surgery", "Implants"], 4.5),
    ],
    "physiotherapist": [
        ("Recovery Plus Physiotherapy", ["Sports Therapy", "Rehabilitation"], 4.4),
        ("Mobility Health Center", ["Pain Management", "Exercise Therapy"], 4.2),
        ("Active Life Physio", ["Post-Surgery Recovery", "Wellness Programs"], 4.3),
    ],
}

# fixed offsets (degrees) so sample resources sit within ~2 km of the user
SAMPLE_OFFSETS = ((0.004, -0.003), (-0.006, 0.005), (0.008, 0.007))


def resource_type(types) -> str:
    if "pharmacy" in types:
        return "pharmacy"
    if "hospital" in types or "emergency_room" in types:
        return "emergency"
    if "physiotherapist" in types or "psychologist" in types:
        return "mental-health"
    return "clinic"


def resource_category(types) -> str:
    for tag, label in (("pharmacy", "Pharmacy"), ("hospital", "Hospital"),
                       ("emergency_room", "Emergency Room"), ("physiotherapist", "Physiotherapy"),
                       ("psychologist", "Mental Health"), ("dentist", "Dental Care")):
        if tag in types:
            return label
    return "Healthcare Facility"


def resource_services(types) -> List[str]:
    services = []
    if "hospital" in types:
        services += ["General Medicine", "Emergency Care"]
    if "pharmacy" in types:
        services += ["Prescription Filling", "Medical Supplies"]
    if "dentist" in types:
        services += ["Dental Care", "Oral Health"]
    if "physiotherapist" in types:
        services += ["Physical Therapy", "Rehabilitation"]
    if "psychologist" in types:
        services += ["Mental Health Counseling", "Therapy"]
    return services or ["Healthcare Services"]


def sample_resources(location: Location, kind: str) -> List[HealthResource]:
    kind = kind if kind in SAMPLE_RESOURCES else "hospital"
    resources = []
    for (name, services, rating), (d_lat, d_lng) in zip(SAMPLE_RESOURCES[kind], SAMPLE_OFFSETS):
        lat, lng = location.lat + d_lat, location.lng + d_lng
        resources.append(HealthResource(
            name=name,
            type=resource_type([kind]),
            category=resource_category([kind]),
            address="Address not available",
            phone="Contact for phone",
            hours="Check hours",
            rating=rating,
            isOpen=False,
            distance=f"{haversine_km(location.lat, location.lng, lat, lng):.1f} km",
            services=services,
            lat=lat,
            lng=lng,
        ))
    return resources


def find_health_resources(location: Location, kind: str = "hospital",
                          places_client: Optional[PlacesClient] = None) -> List[HealthResource]:
    if places_client is None:
        return sample_resources(location, kind)

    place_type = RESOURCE_PLACE_TYPES.get(kind, "hospital")
    try:
        results = places_client.nearby_search(location.lat, location.lng, 5000, place_type)
        resources = []
        for place in results[:10]:
            types = place.get("types") or []
            loc = place.get("geometry", {}).get("location", {})
            lat, lng = loc.get("lat", location.lat), loc.get("lng", location.lng)
            is_open = bool(place.get("opening_hours", {}).get("open_now", False))
            resources.append(HealthResource(
                name=place.get("name") or "Unknown",
                type=resource_type(types),
                category=resource_category(types),
                address=place.get("vicinity") or "Address not available",
                phone=place.get("formatted_phone_number") or "Contact for phone",
                hours="Open now" if is_open else "Check hours",
                rating=place.get("rating") or 0.0,
                isOpen=is_open,
                distance=f"{haversine_km(location.lat, location.lng, lat, lng):.1f} km",
                services=resource_services(types),
                lat=lat,
                lng=lng,
            ))
    except PlacesError as e:
        logger.warning("Nearby search for %s failed, using sample data: %s", kind, e)
        return sample_resources(location, kind)

    return resources or sample_resources(location, kind)


def geocode_address(address: str, places_client: Optional[PlacesClient] = None) -> Optional[Location]:
    if places_client is None or not address.strip():
        return None
    try:
        return places_client.geocode(address)
    except (PlacesError, KeyError, TypeError) as e:
        logger.error("Geocoding failed for %r: %s", address, e)
        return None
