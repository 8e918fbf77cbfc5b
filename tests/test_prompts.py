"""Tests for prompt template registry and message building."""

from __future__ import annotations

import logging

import pytest

from resume_insight.models.llm import ChatMessage
from resume_insight.prompts import builder
from resume_insight.prompts.registry import PromptTemplate, PromptTemplateRegistry
from resume_insight.prompts.templates import (
    SYSTEM_PROMPT_FIX_JSON,
    SYSTEM_PROMPT_STRICT,
    SYSTEM_PROMPT_V2,
)


@pytest.fixture
def registry() -> PromptTemplateRegistry:
    return PromptTemplateRegistry.default()


class TestRegistry:
    def test_default_versions(self, registry):
        assert registry.versions == ["v1", "v2", "v2_1", "v2_2", "v2_3"]
        assert "v2_3" in registry
        assert "v9" not in registry

    def test_resolve_known_version(self, registry):
        resolved = registry.resolve("v2_1")
        assert resolved.effective_version == "v2_1"
        assert resolved.requested_version == "v2_1"
        assert not resolved.fallback

    def test_unknown_version_falls_back_and_warns(self, registry, caplog):
        with caplog.at_level(logging.WARNING):
            resolved = registry.resolve("v9")

        assert resolved.fallback
        assert resolved.effective_version == "v1"
        assert resolved.requested_version == "v9"
        assert "v9" in caplog.text

    def test_only_v2_is_strict(self, registry):
        strict = [v for v in registry.versions if registry.resolve(v).template.strict]
        assert strict == ["v2"]

    def test_default_version_must_be_registered(self):
        with pytest.raises(ValueError):
            PromptTemplateRegistry([PromptTemplate("v2", "x")], default_version="v1")


class TestRenderDeveloperPrompt:
    def test_substitutes_placeholders(self, registry):
        text = builder.render_developer_prompt(registry.resolve("v2"), "JD", "gpt-4o-mini")
        assert '"promptVersion": "v2"' in text
        assert '"model": "gpt-4o-mini"' in text
        assert '"jobDescriptionProvided": true' in text
        assert "{{" not in text

    def test_blank_job_description_renders_false(self, registry):
        text = builder.render_developer_prompt(registry.resolve("v2"), "   ", "m")
        assert '"jobDescriptionProvided": false' in text

    def test_unknown_version_names_requested_version(self, registry):
        text = builder.render_developer_prompt(registry.resolve("v9"), "", "m")
        assert "Prompt version: v9." in text

    def test_model_value_is_not_rescanned(self):
        resolved = PromptTemplateRegistry(
            [PromptTemplate("v1", "model={{MODEL}} version={{PROMPT_VERSION}}")]
        ).resolve("v1")
        text = builder.render_developer_prompt(resolved, "", "{{PROMPT_VERSION}}")
        assert text == "model={{PROMPT_VERSION}} version=v1"


class TestBuildMessages:
    def test_user_prompt_with_job_description(self):
        prompt = builder.build_user_prompt("RESUME", "JD")
        assert prompt == "Resume Text:\nRESUME\n\nJob Description:\nJD"

    def test_user_prompt_blank_job_description(self):
        prompt = builder.build_user_prompt("RESUME", "  ")
        assert prompt.endswith("Job Description:\nN/A")

    def test_user_prompt_with_target_role(self):
        prompt = builder.build_user_prompt("RESUME", "", " Staff Engineer ")
        assert prompt.endswith("\n\nTarget Role:\nStaff Engineer")

    def test_roles_and_system_prompt(self, registry):
        messages = builder.build_messages(registry.resolve("v1"), "RESUME", "", "m")
        assert [m.role for m in messages] == ["system", "developer", "user"]
        assert messages[0].content == SYSTEM_PROMPT_STRICT

        strict = builder.build_messages(registry.resolve("v2"), "RESUME", "", "m")
        assert strict[0].content == SYSTEM_PROMPT_V2

    def test_repair_messages_embed_raw(self, registry):
        messages = builder.build_repair_messages(registry.resolve("v1"), "", "m", "{broken")
        assert messages[0].content == SYSTEM_PROMPT_FIX_JSON
        assert messages[-1].content == (
            "Fix this JSON to match the schema exactly. Output JSON only:\n{broken"
        )

    def test_prepend_system_message(self):
        messages = [ChatMessage("user", "x")]
        assert builder.prepend_system_message(messages, None) is messages
        assert builder.prepend_system_message(messages, "  ") is messages
        prepended = builder.prepend_system_message(messages, "extra")
        assert prepended[0] == ChatMessage("system", "extra")
        assert prepended[1:] == messages


class TestPromptHash:
    def test_deterministic(self, registry):
        a = builder.build_messages(registry.resolve("v2_3"), "RESUME", "JD", "m")
        b = builder.build_messages(registry.resolve("v2_3"), "RESUME", "JD", "m")
        assert builder.prompt_hash(a) == builder.prompt_hash(b)
        assert len(builder.prompt_hash(a)) == 64

    def test_changes_with_content(self, registry):
        a = builder.build_messages(registry.resolve("v1"), "RESUME", "", "m")
        b = builder.build_messages(registry.resolve("v1"), "RESUME!", "", "m")
        assert builder.prompt_hash(a) != builder.prompt_hash(b)

    @pytest.mark.parametrize(
        "changed",
        [
            {"resume_text": "RESUME!"},
            {"job_description": "JD!"},
            {"model": "m2"},
            {"version": "v2_2"},
            {"version": "v7"},
        ],
    )
    def test_any_single_input_changes_hash(self, registry, changed):
        base = {"version": "v2_3", "resume_text": "RESUME", "job_description": "JD", "model": "m"}
        varied = {**base, **changed}

        def hash_of(inputs):
            return builder.prompt_hash(
                builder.build_messages(
                    registry.resolve(inputs["version"]),
                    inputs["resume_text"],
                    inputs["job_description"],
                    inputs["model"],
                )
            )

        assert hash_of(varied) != hash_of(base)

    def test_changes_with_role(self):
        assert builder.prompt_hash([ChatMessage("user", "x")]) != builder.prompt_hash(
            [ChatMessage("system", "x")]
        )
