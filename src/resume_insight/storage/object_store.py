"""Binary object storage for extracted text and rendered documents."""

from __future__ import annotations

import hashlib
import logging
import mimetypes
import secrets
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Protocol

logger = logging.getLogger(__name__)

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

_ZIP_SIGNATURE = b"PK\x03\x04"
_PDF_SIGNATURE = b"%PDF-"


@dataclass(frozen=True)
class StoredObject:
    key: str
    size: int
    mime_type: str


class ObjectStore(Protocol):
    def save(self, user_id: str, file_name: str, data: bytes) -> StoredObject: ...

    def open(self, key: str) -> bytes: ...


def hash_user_key(user_id: str) -> str:
    """Filesystem-safe directory name for a user id."""
    return hashlib.sha256(user_id.encode("utf-8")).hexdigest()


def sanitize_file_name(name: str) -> str:
    if ".." in name:
        raise ValueError("invalid file name")
    cleaned = name.strip().replace("/", "_").replace("\\", "_")
    if not cleaned:
        raise ValueError("invalid file name")
    return cleaned


def detect_mime_type(data: bytes, file_name: str = "") -> str:
    """Sniff the leading bytes, using the file name only to tell zip formats apart."""
    head = data[:512]
    if head.startswith(_ZIP_SIGNATURE):
        if file_name.lower().endswith(".docx"):
            return DOCX_MIME_TYPE
        return "application/zip"
    if head.startswith(_PDF_SIGNATURE):
        return "application/pdf"
    if not head:
        return "text/plain; charset=utf-8"
    try:
        head.decode("utf-8")
    except UnicodeDecodeError:
        guessed, _ = mimetypes.guess_type(file_name)
        return guessed or "application/octet-stream"
    return "text/plain; charset=utf-8"


class LocalObjectStore:
    """Stores objects under <base_dir>/<sha256(user)>/<random>_<name>."""

    def __init__(self, base_dir: str | Path):
        self.base_dir = Path(base_dir)

    def _resolve(self, key: str) -> Path:
        clean = PurePosixPath(key.replace("\\", "/"))
        if clean.is_absolute() or ".." in clean.parts or not clean.parts:
            raise ValueError(f"invalid storage key: {key!r}")
        return self.base_dir.joinpath(*clean.parts)

    def save(self, user_id: str, file_name: str, data: bytes) -> StoredObject:
        name = sanitize_file_name(file_name)
        user_dir = hash_user_key(user_id)
        final_name = f"{secrets.token_hex(16)}_{name}"

        dir_path = self.base_dir / user_dir
        dir_path.mkdir(parents=True, exist_ok=True)
        (dir_path / final_name).write_bytes(data)

        key = f"{user_dir}/{final_name}"
        logger.debug("Stored object %s (%d bytes)", key, len(data))
        return StoredObject(key=key, size=len(data), mime_type=detect_mime_type(data, name))

    def open(self, key: str) -> bytes:
        return self._resolve(key).read_bytes()
