"""Structured LLM completion with a single fallback model.

The primary model is tried once. If it fails for any reason (provider error,
timeout, output that does not match the schema) the fallback model is tried
exactly once. There is no further retry: at most two calls per completion.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from loguru import logger
from pydantic import BaseModel
from pydantic_ai import Agent
from pydantic_ai.settings import ModelSettings

from gym_planner.config.settings import settings
from gym_planner.services.llm.logging_helpers import log_llm_attempt_failed, log_llm_output, log_llm_request
from gym_planner.services.llm.model import get_model

OutputT = TypeVar("OutputT", bound=BaseModel)


@dataclass(frozen=True)
class CompletionSuccess(Generic[OutputT]):
    """Schema-conforming output plus the model that produced it."""

    data: OutputT
    model: str
    fallback_used: bool


@dataclass(frozen=True)
class CompletionFailure:
    """Both attempts failed. One error description per attempt."""

    reason: str
    errors: list[str] = field(default_factory=list)


CompletionResult = CompletionSuccess[OutputT] | CompletionFailure


class StructuredCompletionClient:
    """Runs schema-constrained completions against a primary and fallback model."""

    def __init__(
        self,
        provider: str | None = None,
        primary_model: str | None = None,
        fallback_model: str | None = None,
        attempt_timeout_seconds: float | None = None,
        model_settings: ModelSettings | None = None,
    ) -> None:
        self.provider = provider or settings.llm_provider
        self.primary_model = primary_model or settings.llm_primary_model
        self.fallback_model = fallback_model or settings.llm_fallback_model
        self.attempt_timeout_seconds = attempt_timeout_seconds or settings.llm_attempt_timeout_seconds
        self.model_settings: ModelSettings = model_settings or {
            "temperature": settings.llm_temperature,
            "max_tokens": settings.llm_max_tokens,
        }

    async def _attempt(
        self,
        model_name: str,
        system_prompt: str,
        user_prompt: str,
        output_type: type[OutputT],
        attempt: int,
    ) -> OutputT:
        model = get_model(self.provider, model_name)
        # retries=0 keeps pydantic_ai from re-asking the same model on invalid output
        agent = Agent(
            model=model,
            system_prompt=system_prompt,
            output_type=output_type,
            retries=0,
        )

        log_llm_request(
            context=output_type.__name__,
            model_name=model_name,
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            attempt=attempt,
        )

        result = await asyncio.wait_for(
            agent.run(user_prompt, model_settings=self.model_settings),
            timeout=self.attempt_timeout_seconds,
        )
        output = result.output
        if not isinstance(output, output_type):
            raise TypeError(f"Expected {output_type.__name__}, got {type(output).__name__}")

        log_llm_output(output_type.__name__, model_name, output, attempt)
        return output

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        output_type: type[OutputT],
    ) -> CompletionResult[OutputT]:
        """Request a completion conforming to output_type.

        Args:
            system_prompt: Role and output rules for the model
            user_prompt: Rendered request
            output_type: Pydantic model the output must validate against

        Returns:
            CompletionSuccess with provenance, or CompletionFailure when both models failed
        """
        errors: list[str] = []
        candidates = [(self.primary_model, False), (self.fallback_model, True)]

        for attempt, (model_name, is_fallback) in enumerate(candidates, start=1):
            try:
                output = await self._attempt(model_name, system_prompt, user_prompt, output_type, attempt)
            except Exception as e:
                errors.append(f"{model_name}: {type(e).__name__}: {e}")
                log_llm_attempt_failed(
                    output_type.__name__,
                    model_name,
                    e,
                    next_model=None if is_fallback else self.fallback_model,
                )
                continue

            logger.info(
                "Structured completion succeeded",
                model=model_name,
                fallback_used=is_fallback,
                attempt=attempt,
            )
            return CompletionSuccess(data=output, model=model_name, fallback_used=is_fallback)

        return CompletionFailure(reason="Primary and fallback models both failed", errors=errors)
