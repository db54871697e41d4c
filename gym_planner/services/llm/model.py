"""LLM model abstraction for consistent model access across the application."""

import os

from pydantic_ai.models.openai import OpenAIModel
from pydantic_ai.providers.openai import OpenAIProvider

from gym_planner.config.settings import settings


def get_model(provider: str, model_name: str):
    if provider == "openai":
        # Ensure OPENAI_API_KEY is set from settings for pydantic_ai
        if settings.openai_api_key and not os.getenv("OPENAI_API_KEY"):
            os.environ["OPENAI_API_KEY"] = settings.openai_api_key
        return OpenAIModel(model_name)

    if provider == "openrouter":
        if not settings.openrouter_api_key:
            raise ValueError("OPENROUTER_API_KEY is not set. Please configure it in your environment variables.")
        # OpenRouter speaks the OpenAI chat completions protocol
        return OpenAIModel(
            model_name,
            provider=OpenAIProvider(
                base_url=settings.openrouter_base_url,
                api_key=settings.openrouter_api_key,
            ),
        )

    raise ValueError(f"Unsupported LLM provider: {provider}")
