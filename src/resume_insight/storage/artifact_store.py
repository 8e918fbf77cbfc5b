"""SQLite-backed generated resume metadata."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from resume_insight.models.artifact import GeneratedArtifact

DEFAULT_DB_PATH = Path.home() / ".resume-insight" / "artifacts.db"

_COLUMNS = (
    "id, user_id, document_id, analysis_id, template_id, storage_key, "
    "mime_type, size_bytes, created_at, deleted_at"
)


class ArtifactStore:
    """Insert-only store of GeneratedArtifact rows; deletion is a soft flag."""

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
                CREATE TABLE IF NOT EXISTS generated_resumes (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    document_id TEXT NOT NULL,
                    analysis_id TEXT NOT NULL,
                    template_id TEXT NOT NULL,
                    storage_key TEXT NOT NULL,
                    mime_type TEXT NOT NULL,
                    size_bytes INTEGER NOT NULL,
                    created_at TEXT NOT NULL,
                    deleted_at TEXT
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_generated_resumes_user "
                "ON generated_resumes (user_id, created_at)"
            )

    def create(self, artifact: GeneratedArtifact) -> GeneratedArtifact:
        with self._connect() as conn:
            conn.execute(
                f"INSERT INTO generated_resumes ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    artifact.id,
                    artifact.user_id,
                    artifact.document_id,
                    artifact.analysis_id,
                    artifact.template_id,
                    artifact.storage_key,
                    artifact.mime_type,
                    artifact.size_bytes,
                    artifact.created_at.isoformat(),
                    artifact.deleted_at.isoformat() if artifact.deleted_at else None,
                ),
            )
        return artifact

    def get(self, user_id: str, artifact_id: str) -> GeneratedArtifact | None:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM generated_resumes "
                "WHERE id = ? AND user_id = ? AND deleted_at IS NULL",
                (artifact_id, user_id),
            ).fetchone()
        return self._row_to_artifact(row) if row else None

    def list_by_user(self, user_id: str, limit: int = 50) -> list[GeneratedArtifact]:
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM generated_resumes "
                "WHERE user_id = ? AND deleted_at IS NULL ORDER BY created_at DESC LIMIT ?",
                (user_id, limit),
            ).fetchall()
        return [self._row_to_artifact(row) for row in rows]

    def soft_delete(self, user_id: str, artifact_id: str) -> bool:
        with self._connect() as conn:
            cur = conn.execute(
                "UPDATE generated_resumes SET deleted_at = ? "
                "WHERE id = ? AND user_id = ? AND deleted_at IS NULL",
                (datetime.now(timezone.utc).isoformat(), artifact_id, user_id),
            )
        return cur.rowcount > 0

    @staticmethod
    def _row_to_artifact(row: tuple) -> GeneratedArtifact:
        return GeneratedArtifact(
            id=row[0],
            user_id=row[1],
            document_id=row[2],
            analysis_id=row[3],
            template_id=row[4],
            storage_key=row[5],
            mime_type=row[6],
            size_bytes=row[7],
            created_at=datetime.fromisoformat(row[8]),
            deleted_at=datetime.fromisoformat(row[9]) if row[9] else None,
        )
