import os
import json
import sqlite3
from datetime import datetime, timezone

from pydantic_models import HistoryRecord


class HistoryStore:
    """Per-user symptom analysis history kept in a sqlite file."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _connect(self):
        d = os.path.dirname(self.db_path)
        if d and not os.path.exists(d):
            os.makedirs(d, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        try:
            # idempotent create
            conn.execute("""
            CREATE TABLE IF NOT EXISTS symptom_analyses (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                symptoms TEXT NOT NULL,
                analysis_result TEXT NOT NULL,
                location_data TEXT,
                created_at TEXT NOT NULL
            );
            """)
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    def save(self, record: HistoryRecord) -> int:
        location = json.dumps(record.locationData, ensure_ascii=False) if record.locationData else None
        conn = self._connect()
        try:
            cur = conn.execute(
                "INSERT INTO symptom_analyses (user_id, symptoms, analysis_result, location_data, created_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (record.userId, record.symptoms, json.dumps(record.analysisResult, ensure_ascii=False),
                 location, datetime.now(timezone.utc).isoformat()),
            )
            conn.commit()
            return cur.lastrowid
        finally:
            conn.close()

    def recent(self, user_id: str, limit: int = 10):
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT id, symptoms, analysis_result, location_data, created_at FROM symptom_analyses "
                "WHERE user_id = ? ORDER BY id DESC LIMIT ?",
                (user_id, limit),
            ).fetchall()
        finally:
            conn.close()
        return [
            {
                "id": row[0],
                "symptoms": row[1],
                "analysis_result": json.loads(row[2]),
                "location_data": json.loads(row[3]) if row[3] else None,
                "created_at": row[4],
            }
            for row in rows
        ]
