import os
import sqlite3
import tempfile
import unittest
from unittest import mock

from history_store import HistoryStore
from pydantic_models import HistoryRecord


class TestHistoryStore(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.store = HistoryStore(os.path.join(self.tmp.name, "nested", "history.db"))

    def tearDown(self):
        self.tmp.cleanup()

    def test_save_and_read_back_per_user(self):
        self.store.save(HistoryRecord(userId="a", symptoms="cough", analysisResult={"severity": "mild"}))
        self.store.save(HistoryRecord(
            userId="a", symptoms="chest pain", analysisResult={"severity": "severe"},
            locationData={"coordinates": {"lat": 1.0, "lng": 2.0}, "facilities": []}))
        self.store.save(HistoryRecord(userId="b", symptoms="rash", analysisResult={"severity": "moderate"}))

        rows = self.store.recent("a")

        self.assertEqual([r["symptoms"] for r in rows], ["chest pain", "cough"])
        self.assertEqual(rows[0]["analysis_result"], {"severity": "severe"})
        self.assertEqual(rows[0]["location_data"]["coordinates"], {"lat": 1.0, "lng": 2.0})
        self.assertIsNone(rows[1]["location_data"])

    def test_recent_respects_limit(self):
        for i in range(5):
            self.store.save(HistoryRecord(userId="a", symptoms=f"s{i}", analysisResult={}))
        self.assertEqual(len(self.store.recent("a", limit=2)), 2)

    def test_connection_closed_when_schema_setup_fails(self):
        conn = mock.Mock()
        conn.execute.side_effect = sqlite3.OperationalError("attempt to write a readonly database")
        with mock.patch("history_store.sqlite3.connect", return_value=conn):
            with self.assertRaises(sqlite3.OperationalError):
                self.store.save(HistoryRecord(userId="a", symptoms="cough", analysisResult={}))
        conn.close.assert_called_once_with()

    def test_unknown_user_has_no_history(self):
        self.assertEqual(self.store.recent("nobody"), [])


if __name__ == "__main__":
    unittest.main()
