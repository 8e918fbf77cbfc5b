"""Versioned analysis prompt templates."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from resume_insight.prompts import templates

logger = logging.getLogger(__name__)

DEFAULT_PROMPT_VERSION = "v1"


@dataclass(frozen=True)
class PromptTemplate:
    version: str
    developer: str
    # Selects the "no markdown, never omit keys" system message
    strict: bool = False


@dataclass(frozen=True)
class ResolvedTemplate:
    requested_version: str
    effective_version: str
    template: PromptTemplate
    fallback: bool = False


class PromptTemplateRegistry:
    """Read-only lookup of prompt templates by schema version."""

    def __init__(self, prompt_templates: list[PromptTemplate], default_version: str = DEFAULT_PROMPT_VERSION):
        self._templates = {t.version: t for t in prompt_templates}
        if default_version not in self._templates:
            raise ValueError(f"default prompt version {default_version!r} is not registered")
        self.default_version = default_version

    @classmethod
    def default(cls) -> PromptTemplateRegistry:
        return cls([
            PromptTemplate("v1", templates.PROMPT_V1),
            PromptTemplate("v2", templates.PROMPT_V2, strict=True),
            PromptTemplate("v2_1", templates.PROMPT_V2_1),
            PromptTemplate("v2_2", templates.PROMPT_V2_2),
            PromptTemplate("v2_3", templates.PROMPT_V2_3),
        ])

    @property
    def versions(self) -> list[str]:
        return list(self._templates)

    def __contains__(self, version: str) -> bool:
        return version in self._templates

    def resolve(self, version: str) -> ResolvedTemplate:
        """Look up a template, falling back to the default version.

        Unknown versions never raise. The requested version is kept so that
        the rendered prompt still names it.
        """
        requested = (version or "").strip()
        template = self._templates.get(requested)
        if template is not None:
            return ResolvedTemplate(requested, requested, template)

        logger.warning("Unknown prompt version %r, defaulting to %s", requested, self.default_version)
        return ResolvedTemplate(
            requested_version=requested,
            effective_version=self.default_version,
            template=self._templates[self.default_version],
            fallback=True,
        )
