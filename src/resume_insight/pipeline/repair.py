"""Direct-then-repair loop for analysis completions."""

from __future__ import annotations

import enum
import logging

from resume_insight.clients.gateway import CompletionGateway
from resume_insight.errors import InvalidLLMOutputError
from resume_insight.models.llm import (
    AnalysisCompletion,
    AnalyzeInput,
    AnalyzeOptions,
    ChatMessage,
)
from resume_insight.prompts import builder
from resume_insight.prompts.registry import PromptTemplateRegistry
from resume_insight.utils.json_parser import is_valid_json

logger = logging.getLogger(__name__)


class RepairState(enum.Enum):
    DIRECT = "direct"
    REPAIRING = "repairing"
    DONE = "done"
    FAILED = "failed"


class JSONRepairLoop:
    """Runs at most two completion calls until the response is valid JSON.

    DIRECT sends the analysis prompt. An invalid response moves to REPAIRING,
    which embeds the raw text in a fix-JSON prompt. A second invalid response
    is FAILED; there is no third call.
    """

    def __init__(self, gateway: CompletionGateway, registry: PromptTemplateRegistry, model: str):
        self.gateway = gateway
        self.registry = registry
        self.model = model

    async def run(self, data: AnalyzeInput, options: AnalyzeOptions | None = None) -> AnalysisCompletion:
        options = options or AnalyzeOptions()
        resolved = self.registry.resolve(data.schema_version)

        state = RepairState.DIRECT
        raw = ""
        if options.repair_raw is not None:
            state = RepairState.REPAIRING
            raw = options.repair_raw

        completion = AnalysisCompletion(raw="", prompt_hash="", calls=0)
        while state in (RepairState.DIRECT, RepairState.REPAIRING):
            if state is RepairState.DIRECT:
                messages = builder.build_messages(
                    resolved, data.resume_text, data.job_description, self.model, data.target_role
                )
            else:
                messages = builder.build_repair_messages(
                    resolved, data.job_description, self.model, raw
                )
            messages = builder.prepend_system_message(messages, options.extra_system_message)

            raw = await self._call(messages, data.schema_version, completion)
            if is_valid_json(raw):
                state = RepairState.DONE
            elif state is RepairState.DIRECT:
                logger.warning("Invalid JSON from model %s, requesting repair", self.model)
                state = RepairState.REPAIRING
            else:
                state = RepairState.FAILED

        if state is RepairState.FAILED:
            logger.error(
                "Invalid JSON after repair: model=%s schema_version=%s", self.model, data.schema_version
            )
            raise InvalidLLMOutputError(f"invalid JSON from {self.gateway.provider.name}")

        completion.raw = raw
        return completion

    async def _call(
        self, messages: list[ChatMessage], schema_version: str, completion: AnalysisCompletion
    ) -> str:
        completion.prompt_hash = builder.prompt_hash(messages)
        completion.calls += 1
        result = await self.gateway.complete(messages, self.model, schema_version=schema_version)
        if result.usage is not None:
            completion.usage.append(result.usage)
        return result.text
