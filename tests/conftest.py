"""Shared pytest fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from answer_consensus.models import Attempt, Question
from answer_consensus.parser import parse_response
from answer_consensus.providers.base import AIProvider
from config.config_loader import (
    AppConfig,
    AttachmentsConfig,
    DefaultsConfig,
    InboxConfig,
    ModelConfig,
    PromptsConfig,
    SamplingConfig,
    SamplingParams,
)


def answer_text(answer: str, confidence: str = "High", analysis: str = "Reasoning.") -> str:
    """Raw model output that follows the FINAL ANSWER contract."""
    return f"{analysis}\n\n**FINAL ANSWER:** {answer}\nConfidence: {confidence}"


def make_attempt(attempt_index: int, answer: str) -> Attempt:
    raw = answer_text(answer)
    return Attempt(attempt_index=attempt_index, raw_response=raw, parsed=parse_response(raw))


@pytest.fixture
def sample_model_config() -> ModelConfig:
    return ModelConfig(
        name="test_model",
        sdk="openai",
        model="test-model-1",
        api_key_env="TEST_API_KEY",
        timeout_sec=30,
        base_url=None,
    )


@pytest.fixture
def sample_prompts_config() -> PromptsConfig:
    return PromptsConfig(
        system="You are a TDS expert. End with **FINAL ANSWER:** and Confidence:.",
        verification="IMPORTANT: Double-check logic before finalizing answer.",
    )


@pytest.fixture
def sample_sampling_config() -> SamplingConfig:
    return SamplingConfig(
        first=SamplingParams(temperature=0.3, max_output_tokens=4000),
        retry=SamplingParams(temperature=0.5, max_output_tokens=4000),
    )


@pytest.fixture
def sample_defaults_config(tmp_path: Path) -> DefaultsConfig:
    return DefaultsConfig(
        attempts=3,
        max_attempts=5,
        provider="openai",
        output_dir=tmp_path / "output",
        pacing_sec=0.0,
    )


@pytest.fixture
def sample_app_config(
    sample_defaults_config: DefaultsConfig,
    sample_prompts_config: PromptsConfig,
    sample_sampling_config: SamplingConfig,
    tmp_path: Path,
) -> AppConfig:
    model_cfg = ModelConfig(
        name="openai",
        sdk="openai",
        model="gpt-5",
        api_key_env="OPENAI_API_KEY",
        timeout_sec=60,
    )
    return AppConfig(
        defaults=sample_defaults_config,
        sampling=sample_sampling_config,
        models={"openai": model_cfg},
        prompts=sample_prompts_config,
        attachments=AttachmentsConfig(),
        inbox=InboxConfig(dir=tmp_path / "inbox", archive_dir=tmp_path / "inbox" / "archive"),
        available_providers={"openai"},
    )


@pytest.fixture
def sample_question() -> Question:
    return Question(text="Which uv command adds a dev dependency?", source="cli")


class MockProvider(AIProvider):
    """Test double AIProvider."""

    def __init__(self, provider_name: str = "mock", response_content: str = "") -> None:
        self._name = provider_name
        self._response_content = response_content or answer_text("uv add --dev pytest")
        # Shadow the class method with an AsyncMock at the instance level.
        # ABC check passes because invoke is defined in the class body below.
        self.invoke = AsyncMock(return_value=self._response_content)  # type: ignore[assignment]

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return "mock-model"

    async def invoke(self, prompt: str, sampling: SamplingParams) -> str:  # type: ignore[override]
        """Default implementation; replaced by AsyncMock in __init__."""
        return self._response_content


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()
