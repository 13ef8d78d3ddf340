"""OpenAI provider using the openai SDK Responses API with native async."""

import asyncio
import logging
import os
import time

import openai
from openai import AsyncOpenAI

from answer_consensus.providers.base import (
    AIProvider,
    AuthError,
    ServiceError,
    TransportError,
)
from config.config_loader import ModelConfig, SamplingParams

logger = logging.getLogger(__name__)


class OpenAIProvider(AIProvider):
    """OpenAI provider via openai SDK."""

    def __init__(self, config: ModelConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise AuthError(config.name, f"Missing API key: {config.api_key_env}")
        self._client = AsyncOpenAI(api_key=api_key, base_url=config.base_url)

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    async def invoke(self, prompt: str, sampling: SamplingParams) -> str:
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.responses.create(
                    model=self._config.model,
                    input=prompt,
                    temperature=sampling.temperature,
                    max_output_tokens=sampling.max_output_tokens,
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise TransportError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except (openai.AuthenticationError, openai.PermissionDeniedError) as exc:
            raise AuthError(self._config.name, f"Credential rejected: {exc.status_code} {exc.response.text}") from exc
        except openai.APIStatusError as exc:
            raise ServiceError(self._config.name, exc.status_code, exc.response.text) from exc
        except openai.APIConnectionError as exc:
            raise TransportError(self._config.name, f"Connection failed: {exc}") from exc
        except Exception as exc:
            raise TransportError(self._config.name, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start
        text = response.output_text or ""

        token_count: int | None = None
        if response.usage:
            token_count = response.usage.total_tokens

        if not text.strip():
            logger.warning("OpenAI returned empty output after %.2fs", latency)

        logger.info(
            "OpenAI call (t=%.1f): %.2fs, %s tokens",
            sampling.temperature,
            latency,
            token_count,
        )
        return text
