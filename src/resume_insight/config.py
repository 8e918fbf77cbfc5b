"""Application configuration loaded from config.yaml and the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

DEFAULT_TEMPLATE_ID = "resume_modern_ats_v1"


@dataclass(frozen=True)
class LLMConfig:
    provider: str = "openai"
    model: str = "gpt-4o-mini"
    timeout: float = 120
    max_tokens: int = 8192
    # Models that reject a fixed temperature, matched exactly or by prefix
    no_temperature_models: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not 1 <= self.timeout <= 900:
            raise ValueError(f"llm.timeout must be between 1 and 900 seconds, got {self.timeout}")
        if self.max_tokens < 1:
            raise ValueError(f"llm.max_tokens must be positive, got {self.max_tokens}")
        # YAML lists arrive as list; keep the frozen instance hashable
        object.__setattr__(self, "no_temperature_models", tuple(self.no_temperature_models))


@dataclass(frozen=True)
class ApplyConfig:
    template_id: str = DEFAULT_TEMPLATE_ID


@dataclass(frozen=True)
class StorageConfig:
    local_store_dir: str = "./data"
    artifact_db_path: str = "~/.resume-insight/artifacts.db"
    usage_db_path: str = "~/.resume-insight/usage.db"

    @property
    def resolved_artifact_db_path(self) -> Path:
        return Path(self.artifact_db_path).expanduser()

    @property
    def resolved_usage_db_path(self) -> Path:
        return Path(self.usage_db_path).expanduser()


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    apply: ApplyConfig = field(default_factory=ApplyConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)


def split_model_list(raw: str) -> tuple[str, ...]:
    """Split a comma-separated model list, dropping blanks."""
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _env_overrides(raw: dict) -> dict:
    llm = dict(raw.get("llm", {}))
    storage = dict(raw.get("storage", {}))

    if value := os.environ.get("LLM_PROVIDER", "").strip():
        llm["provider"] = value.lower()
    if value := os.environ.get("LLM_MODEL", "").strip():
        llm["model"] = value
    if value := os.environ.get("LLM_TIMEOUT_SECONDS", "").strip():
        try:
            parsed = float(value)
        except ValueError:
            parsed = 0
        # Non-numeric or non-positive values keep the configured timeout
        if parsed > 0:
            llm["timeout"] = parsed
    if value := os.environ.get("LLM_NO_TEMP0_MODELS", "").strip():
        llm["no_temperature_models"] = split_model_list(value)
    if value := os.environ.get("LOCAL_STORE_DIR", "").strip():
        storage["local_store_dir"] = value

    return {**raw, "llm": llm, "storage": storage}


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults.

    Environment variables take precedence over the file.
    """
    if path is None:
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    raw = _env_overrides(raw)

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        apply=ApplyConfig(**raw.get("apply", {})),
        storage=StorageConfig(**raw.get("storage", {})),
    )
