"""Tests for the direct-then-repair JSON loop."""

from __future__ import annotations

import pytest

from resume_insight.errors import InvalidLLMOutputError, ProviderError
from resume_insight.models.llm import AnalyzeInput, AnalyzeOptions
from resume_insight.pipeline.repair import JSONRepairLoop
from resume_insight.prompts import builder
from resume_insight.prompts.registry import PromptTemplateRegistry
from resume_insight.prompts.templates import SYSTEM_PROMPT_FIX_JSON


@pytest.fixture
def loop(gateway) -> JSONRepairLoop:
    return JSONRepairLoop(gateway, PromptTemplateRegistry.default(), "gpt-4o-mini")


@pytest.fixture
def data(sample_resume_text) -> AnalyzeInput:
    return AnalyzeInput(resume_text=sample_resume_text, schema_version="v2")


class TestJSONRepairLoop:
    async def test_valid_json_needs_one_call(self, loop, data, scripted_provider):
        scripted_provider.responses = ['{"ok": true}']

        completion = await loop.run(data)

        assert completion.raw == '{"ok": true}'
        assert completion.calls == 1
        assert len(scripted_provider.requests) == 1
        assert completion.usage[0].total_tokens == 150

    async def test_invalid_then_valid_repairs_once(self, loop, data, scripted_provider):
        scripted_provider.responses = ["Sure! {not json", '{"ok": true}']

        completion = await loop.run(data)

        assert completion.raw == '{"ok": true}'
        assert completion.calls == 2
        repair = scripted_provider.requests[1].messages
        assert repair[0].content == SYSTEM_PROMPT_FIX_JSON
        assert repair[-1].content.endswith("Output JSON only:\nSure! {not json")
        assert completion.prompt_hash == builder.prompt_hash(repair)

    async def test_invalid_twice_fails_without_third_call(self, loop, data, scripted_provider):
        scripted_provider.responses = ["nope", "still nope", '{"never": "sent"}']

        with pytest.raises(InvalidLLMOutputError, match="invalid JSON from scripted"):
            await loop.run(data)

        assert len(scripted_provider.requests) == 2

    async def test_repair_raw_skips_direct_attempt(self, loop, data, scripted_provider):
        scripted_provider.responses = ['{"fixed": 1}']

        completion = await loop.run(data, AnalyzeOptions(repair_raw='{"broken": '))

        assert completion.calls == 1
        messages = scripted_provider.requests[0].messages
        assert messages[0].content == SYSTEM_PROMPT_FIX_JSON
        assert messages[-1].content.endswith('{"broken": ')

    async def test_repair_raw_invalid_fails_after_one_call(self, loop, data, scripted_provider):
        scripted_provider.responses = ["bad", "unused"]

        with pytest.raises(InvalidLLMOutputError):
            await loop.run(data, AnalyzeOptions(repair_raw="{"))

        assert len(scripted_provider.requests) == 1

    async def test_extra_system_message_is_prepended(self, loop, data, scripted_provider):
        scripted_provider.responses = ["{}"]

        await loop.run(data, AnalyzeOptions(extra_system_message="Keep JSON only."))

        messages = scripted_provider.requests[0].messages
        assert messages[0].role == "system"
        assert messages[0].content == "Keep JSON only."
        assert [m.role for m in messages[1:]] == ["system", "developer", "user"]

    async def test_prompt_hash_is_deterministic(self, gateway, scripted_provider, data):
        scripted_provider.responses = ["{}", "{}"]
        registry = PromptTemplateRegistry.default()

        first = await JSONRepairLoop(gateway, registry, "gpt-4o-mini").run(data)
        second = await JSONRepairLoop(gateway, registry, "gpt-4o-mini").run(data)

        assert first.prompt_hash == second.prompt_hash

    async def test_provider_errors_propagate(self, loop, data, scripted_provider):
        scripted_provider.responses = [ProviderError("boom", "server_error", status_code=500)]

        with pytest.raises(ProviderError):
            await loop.run(data)

        assert len(scripted_provider.requests) == 1
