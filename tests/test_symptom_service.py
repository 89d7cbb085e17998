import json
import unittest

from errors import ModelError
from pydantic_models import ChatRequest, Location, SymptomReport
from symptom_service import CHAT_UNAVAILABLE, DISCLAIMER, analyze_symptoms, health_chat

from fakes import GOOD_REPLY, FailingHistory, FakeModel, RecordingHistory, failing_model

DELHI = Location(lat=28.6, lng=77.2)


class TestAnalyzeSymptoms(unittest.TestCase):
    def test_emergency_round_trip_with_mock_facilities(self):
        model = FakeModel(reply="I cannot produce JSON right now.")
        report = SymptomReport(symptoms="severe chest pain, can't breathe", userLocation=DELHI)

        result = analyze_symptoms(report, model)

        self.assertEqual(result.severity, "severe")
        self.assertEqual(result.urgencyLevel, "medium")
        self.assertTrue(result.hasLocationSuggestions)
        self.assertLessEqual(len(result.nearbyFacilities), 3)
        phones = [f.phoneNumber for f in result.nearbyFacilities]
        self.assertIn("102", phones)
        self.assertIn("General Hospital", [f.type for f in result.nearbyFacilities])

    def test_prompt_and_generation_parameters(self):
        model = FakeModel()
        analyze_symptoms(SymptomReport(symptoms="sore throat"), model)
        call = model.calls[0]
        self.assertIn('"sore throat"', call["prompt"])
        self.assertEqual((call["temperature"], call["top_p"], call["max_tokens"]), (0.3, 0.95, 2048))

    def test_model_fields_pass_through(self):
        result = analyze_symptoms(SymptomReport(symptoms="fever and cough"), FakeModel())
        self.assertEqual(result.possibleCauses, GOOD_REPLY["possibleCauses"])
        self.assertEqual(result.urgencyLevel, "low")
        self.assertTrue(result.timestamp.endswith("Z"))

    def test_no_location_means_no_facilities(self):
        result = analyze_symptoms(SymptomReport(symptoms="mild headache"), FakeModel())
        self.assertEqual(result.nearbyFacilities, [])
        self.assertFalse(result.hasLocationSuggestions)

    def test_no_categories_means_no_facilities(self):
        report = SymptomReport(symptoms="feeling tired", userLocation=DELHI)
        result = analyze_symptoms(report, FakeModel())
        self.assertEqual(result.nearbyFacilities, [])

    def test_model_failure_propagates(self):
        with self.assertRaises(ModelError):
            analyze_symptoms(SymptomReport(symptoms="headache"), failing_model())

    def test_saves_history_for_authenticated_user(self):
        history = RecordingHistory()
        report = SymptomReport(symptoms="chest pain", userLocation=DELHI, saveToHistory=True)

        result = analyze_symptoms(report, FakeModel(), history_store=history, user_id="user-1")

        self.assertEqual(len(history.records), 1)
        record = history.records[0]
        self.assertEqual(record.userId, "user-1")
        self.assertEqual(record.analysisResult["severity"], GOOD_REPLY["severity"])
        self.assertEqual(record.locationData["coordinates"], {"lat": 28.6, "lng": 77.2})
        self.assertEqual(len(record.locationData["facilities"]), len(result.nearbyFacilities))

    def test_history_skipped_when_not_requested_or_anonymous(self):
        history = RecordingHistory()
        analyze_symptoms(SymptomReport(symptoms="cough"), FakeModel(), history_store=history, user_id="u")
        analyze_symptoms(SymptomReport(symptoms="cough", saveToHistory=True), FakeModel(),
                         history_store=history, user_id=None)
        self.assertEqual(history.records, [])

    def test_history_failure_does_not_fail_request(self):
        history = FailingHistory()
        report = SymptomReport(symptoms="rash", saveToHistory=True)
        with self.assertLogs("symptom_service", level="ERROR"):
            result = analyze_symptoms(report, FakeModel(), history_store=history, user_id="u")
        self.assertEqual(history.attempts, 1)
        self.assertEqual(result.severity, GOOD_REPLY["severity"])


class TestHealthChat(unittest.TestCase):
    def test_reply_ends_with_disclaimer(self):
        reply = health_chat(ChatRequest(message="How can I sleep better?"), FakeModel(reply="Keep a routine."))
        self.assertTrue(reply.response.startswith("Keep a routine."))
        self.assertTrue(reply.response.endswith(DISCLAIMER))
        self.assertEqual(reply.healthConditions, [])
        self.assertFalse(reply.hasLocationSuggestions)

    def test_location_and_conditions_add_suggestions(self):
        model = FakeModel(reply="Sorry to hear that.")
        reply = health_chat(ChatRequest(message="I have chest pain", userLocation=DELHI), model)
        self.assertEqual(reply.healthConditions, ["cardiology"])
        self.assertTrue(reply.hasLocationSuggestions)
        self.assertIn("Heart Care Medical Center", reply.response)
        self.assertEqual(model.calls[0]["temperature"], 0.7)
        self.assertEqual(model.calls[0]["max_tokens"], 1024)

    def test_conditions_without_location_have_no_suggestions(self):
        reply = health_chat(ChatRequest(message="I feel stress"), FakeModel(reply="ok"))
        self.assertEqual(reply.healthConditions, ["mental-health"])
        self.assertFalse(reply.hasLocationSuggestions)
        self.assertNotIn("Nearby Healthcare Facilities", reply.response)

    def test_empty_completion_uses_apology(self):
        reply = health_chat(ChatRequest(message="hi"), FakeModel(reply=""))
        self.assertTrue(reply.response.startswith(CHAT_UNAVAILABLE))


if __name__ == "__main__":
    unittest.main()
