"""Helper functions for logging structured completion attempts."""

from __future__ import annotations

from loguru import logger
from pydantic import BaseModel

MAX_LOGGED_OUTPUT_CHARS = 2000


def log_llm_request(
    context: str,
    model_name: str,
    system_prompt: str,
    user_prompt: str,
    attempt: int,
) -> None:
    """Log the prompt submitted for one completion attempt.

    Args:
        context: What the completion is for (e.g., "Plan Generation")
        model_name: Model the request is sent to
        system_prompt: System prompt sent to the model
        user_prompt: Rendered user prompt
        attempt: 1 for the primary model, 2 for the fallback
    """
    logger.debug(
        f"LLM request: {context}",
        model=model_name,
        attempt=attempt,
        system_prompt_chars=len(system_prompt),
        user_prompt=user_prompt,
    )


def log_llm_output(context: str, model_name: str, output: BaseModel, attempt: int) -> None:
    """Log the schema-validated output of an attempt, truncated."""
    dumped = output.model_dump_json()
    if len(dumped) > MAX_LOGGED_OUTPUT_CHARS:
        dumped = dumped[:MAX_LOGGED_OUTPUT_CHARS] + "... (truncated)"

    logger.debug(
        f"LLM response: {context}",
        model=model_name,
        attempt=attempt,
        output_type=type(output).__name__,
        output_json=dumped,
    )


def log_llm_attempt_failed(context: str, model_name: str, error: Exception, next_model: str | None) -> None:
    """Log a failed attempt. WARNING when a fallback follows, ERROR otherwise."""
    if next_model is not None:
        logger.warning(
            f"LLM attempt failed, trying fallback: {context}",
            model=model_name,
            fallback_model=next_model,
            error_type=type(error).__name__,
            error_message=str(error),
        )
    else:
        logger.error(
            f"LLM attempt failed, no fallback left: {context}",
            model=model_name,
            error_type=type(error).__name__,
            error_message=str(error),
        )
