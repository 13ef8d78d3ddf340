"""Anthropic Claude provider using anthropic SDK with native async."""

import asyncio
import logging
import os
import time

import anthropic as anthropic_sdk

from answer_consensus.providers.base import (
    AIProvider,
    AuthError,
    ServiceError,
    TransportError,
)
from config.config_loader import ModelConfig, SamplingParams

logger = logging.getLogger(__name__)


class AnthropicProvider(AIProvider):
    """Anthropic Claude provider via anthropic SDK."""

    def __init__(self, config: ModelConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise AuthError(config.name, f"Missing API key: {config.api_key_env}")
        self._client = anthropic_sdk.AsyncAnthropic(api_key=api_key)

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    async def invoke(self, prompt: str, sampling: SamplingParams) -> str:
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.messages.create(
                    model=self._config.model,
                    max_tokens=sampling.max_output_tokens,
                    temperature=sampling.temperature,
                    messages=[{"role": "user", "content": prompt}],
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise TransportError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except (anthropic_sdk.AuthenticationError, anthropic_sdk.PermissionDeniedError) as exc:
            raise AuthError(self._config.name, f"Credential rejected: {exc.status_code} {exc.response.text}") from exc
        except anthropic_sdk.APIStatusError as exc:
            raise ServiceError(self._config.name, exc.status_code, exc.response.text) from exc
        except anthropic_sdk.APIConnectionError as exc:
            raise TransportError(self._config.name, f"Connection failed: {exc}") from exc
        except Exception as exc:
            raise TransportError(self._config.name, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        text_blocks = [b.text for b in response.content if b.type == "text"]
        content = "\n".join(text_blocks)
        if not content.strip():
            logger.warning("Anthropic returned no text blocks after %.2fs", latency)

        token_count: int | None = None
        if response.usage:
            token_count = response.usage.input_tokens + response.usage.output_tokens

        logger.info(
            "Anthropic call (t=%.1f): %.2fs, %s tokens",
            sampling.temperature,
            latency,
            token_count,
        )
        return content
