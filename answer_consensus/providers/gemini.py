"""Gemini provider using google-genai SDK with native async."""

import asyncio
import logging
import os
import time

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from answer_consensus.providers.base import (
    AIProvider,
    AuthError,
    ServiceError,
    TransportError,
)
from config.config_loader import ModelConfig, SamplingParams

logger = logging.getLogger(__name__)

_AUTH_STATUS_CODES = {401, 403}


class GeminiProvider(AIProvider):
    """Google Gemini provider via google-genai SDK."""

    def __init__(self, config: ModelConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise AuthError(config.name, f"Missing API key: {config.api_key_env}")
        self._client = genai.Client(api_key=api_key)

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    async def invoke(self, prompt: str, sampling: SamplingParams) -> str:
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self._config.model,
                    contents=prompt,
                    config=genai_types.GenerateContentConfig(
                        temperature=sampling.temperature,
                        max_output_tokens=sampling.max_output_tokens,
                    ),
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise TransportError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except genai_errors.APIError as exc:
            if exc.code in _AUTH_STATUS_CODES:
                raise AuthError(self._config.name, f"Credential rejected: {exc.code} {exc.message}") from exc
            raise ServiceError(self._config.name, exc.code, exc.message or "") from exc
        except Exception as exc:
            raise TransportError(self._config.name, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start
        text = response.text or ""
        if not text.strip():
            logger.warning("Gemini returned empty text after %.2fs", latency)

        token_count: int | None = None
        if response.usage_metadata:
            token_count = response.usage_metadata.total_token_count

        logger.info(
            "Gemini call (t=%.1f): %.2fs, %s tokens",
            sampling.temperature,
            latency,
            token_count,
        )
        return text
