"""SQLite-backed usage record storage."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

from resume_insight.logging.models import UsageRecord

DEFAULT_DB_PATH = Path.home() / ".resume-insight" / "usage.db"


class UsageStore:
    """SQLite-backed store for completion usage records with WAL mode."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS usage_records (
                    id TEXT PRIMARY KEY,
                    timestamp TEXT NOT NULL,
                    provider TEXT NOT NULL,
                    model TEXT NOT NULL,
                    schema_version TEXT NOT NULL DEFAULT '',
                    prompt_tokens INTEGER NOT NULL DEFAULT 0,
                    completion_tokens INTEGER NOT NULL DEFAULT 0,
                    total_tokens INTEGER NOT NULL DEFAULT 0,
                    estimated_cost_usd REAL NOT NULL DEFAULT 0.0,
                    success INTEGER NOT NULL DEFAULT 1,
                    error_message TEXT
                )
            """)

    def save_record(self, record: UsageRecord) -> None:
        """Persist a usage record."""
        with self._connect() as conn:
            conn.execute(
                """INSERT OR REPLACE INTO usage_records
                   (id, timestamp, provider, model, schema_version, prompt_tokens,
                    completion_tokens, total_tokens, estimated_cost_usd, success,
                    error_message)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    record.id,
                    record.timestamp.isoformat(),
                    record.provider,
                    record.model,
                    record.schema_version,
                    record.prompt_tokens,
                    record.completion_tokens,
                    record.total_tokens,
                    record.estimated_cost_usd,
                    1 if record.success else 0,
                    record.error_message,
                ),
            )

    def get_records(
        self,
        model: str | None = None,
        limit: int = 50,
    ) -> list[UsageRecord]:
        """Retrieve usage records, optionally filtered by model."""
        with self._connect() as conn:
            if model is not None:
                rows = conn.execute(
                    "SELECT * FROM usage_records WHERE model = ? ORDER BY timestamp DESC LIMIT ?",
                    (model, limit),
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM usage_records ORDER BY timestamp DESC LIMIT ?",
                    (limit,),
                ).fetchall()
        return [self._row_to_record(row) for row in rows]

    def get_monthly_stats(self) -> dict:
        """Get aggregated stats for the current month."""
        now = datetime.now()
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        with self._connect() as conn:
            row = conn.execute(
                """SELECT
                       COUNT(*) as total_calls,
                       SUM(prompt_tokens) as total_prompt,
                       SUM(completion_tokens) as total_completion,
                       SUM(estimated_cost_usd) as total_cost,
                       SUM(CASE WHEN success = 1 THEN 1 ELSE 0 END) as success_count
                   FROM usage_records
                   WHERE timestamp >= ?""",
                (month_start.isoformat(),),
            ).fetchone()
        return {
            "total_calls": row[0] or 0,
            "total_prompt_tokens": row[1] or 0,
            "total_completion_tokens": row[2] or 0,
            "total_cost_usd": row[3] or 0.0,
            "success_rate": (row[4] / row[0] * 100) if row[0] else 0.0,
            "month": now.strftime("%Y-%m"),
        }

    def get_total_cost(self) -> float:
        """Get total estimated cost across all records."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT SUM(estimated_cost_usd) FROM usage_records"
            ).fetchone()
        return row[0] or 0.0

    @staticmethod
    def _row_to_record(row: tuple) -> UsageRecord:
        return UsageRecord(
            id=row[0],
            timestamp=datetime.fromisoformat(row[1]),
            provider=row[2],
            model=row[3],
            schema_version=row[4],
            prompt_tokens=row[5],
            completion_tokens=row[6],
            total_tokens=row[7],
            estimated_cost_usd=row[8],
            success=bool(row[9]),
            error_message=row[10],
        )
