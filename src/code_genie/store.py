from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from pathlib import Path

from code_genie.models import ExtractedArtifact, GenerationResult, HistoryEntry

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_CAPACITY = 50

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS history (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    entry_id TEXT NOT NULL UNIQUE,
    session_id TEXT NOT NULL,
    prompt TEXT NOT NULL,
    mode TEXT NOT NULL,
    language TEXT NOT NULL,
    code TEXT NOT NULL,
    files_json TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_history_session ON history(session_id, seq);
"""


class HistoryStore:
    """Bounded, per-session generation log. Oldest entries are evicted first."""

    def __init__(self, db_path: Path, capacity: int = DEFAULT_HISTORY_CAPACITY):
        if capacity < 1:
            raise ValueError("History capacity must be at least 1.")
        self.db_path = Path(db_path)
        self.capacity = capacity

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(SCHEMA_SQL)

    def append(self, entry: HistoryEntry) -> int:
        """Insert an entry and trim the session log; returns the evicted count."""
        files_json = json.dumps([artifact.model_dump() for artifact in entry.files], ensure_ascii=False)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO history(
                    entry_id, session_id, prompt, mode, language, code, files_json, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.id,
                    entry.session_id,
                    entry.prompt,
                    entry.mode,
                    entry.language,
                    entry.code,
                    files_json,
                    entry.timestamp.isoformat(),
                ),
            )
            before = conn.total_changes
            conn.execute(
                """
                DELETE FROM history
                WHERE session_id = ?
                  AND seq NOT IN (
                      SELECT seq FROM history WHERE session_id = ? ORDER BY seq DESC LIMIT ?
                  )
                """,
                (entry.session_id, entry.session_id, self.capacity),
            )
            evicted = conn.total_changes - before

        if evicted:
            logger.debug("Evicted %d history entries for session %s", evicted, entry.session_id)
        return evicted

    def record(self, result: GenerationResult, session_id: str) -> HistoryEntry:
        """Persist a successful generation as a new history entry."""
        entry = entry_from_result(result, session_id)
        self.append(entry)
        return entry

    def list_entries(self, session_id: str, limit: int | None = None) -> list[HistoryEntry]:
        query = "SELECT * FROM history WHERE session_id = ? ORDER BY seq DESC"
        params: tuple = (session_id,)
        if limit is not None:
            query += " LIMIT ?"
            params = (*params, limit)

        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
            return [_row_to_entry(row) for row in rows]

    def get_entry(self, session_id: str, entry_id: str) -> HistoryEntry | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM history WHERE session_id = ? AND entry_id = ?",
                (session_id, entry_id),
            ).fetchone()
            return _row_to_entry(row) if row else None

    def count(self, session_id: str) -> int:
        with self._connect() as conn:
            row = conn.execute("SELECT COUNT(*) FROM history WHERE session_id = ?", (session_id,)).fetchone()
            return int(row[0])

    def clear(self, session_id: str) -> int:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM history WHERE session_id = ?", (session_id,))
            return cursor.rowcount


def _row_to_entry(row: sqlite3.Row) -> HistoryEntry:
    return HistoryEntry(
        id=row["entry_id"],
        session_id=row["session_id"],
        prompt=row["prompt"],
        mode=row["mode"],
        language=row["language"],
        code=row["code"],
        files=[ExtractedArtifact.model_validate(item) for item in json.loads(row["files_json"])],
        timestamp=row["created_at"],
    )


def entry_from_result(result: GenerationResult, session_id: str) -> HistoryEntry:
    return HistoryEntry(
        id=uuid.uuid4().hex[:12],
        session_id=session_id,
        prompt=result.prompt,
        mode=result.mode,
        language=result.language,
        code=result.code,
        files=result.files,
        timestamp=result.timestamp,
    )
