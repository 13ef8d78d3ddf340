"""Load settings.yaml into typed dataclasses. Reports which providers have API keys."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"


@dataclass
class ModelConfig:
    name: str
    sdk: str
    model: str
    api_key_env: str
    timeout_sec: int
    base_url: str | None = None


@dataclass(frozen=True)
class SamplingParams:
    temperature: float
    max_output_tokens: int


@dataclass
class SamplingConfig:
    first: SamplingParams
    retry: SamplingParams

    def for_attempt(self, attempt_index: int) -> SamplingParams:
        """First attempt is low-variance, later attempts re-derive with more spread."""
        return self.first if attempt_index <= 1 else self.retry


@dataclass
class PromptsConfig:
    system: str
    verification: str


@dataclass
class DefaultsConfig:
    attempts: int
    max_attempts: int
    provider: str
    output_dir: Path
    pacing_sec: float = 0.5
    answer_prefix_len: int = 100


@dataclass
class AttachmentsConfig:
    text_budget_bytes: int = 20000
    max_files: int = 10


@dataclass
class InboxConfig:
    dir: Path
    archive_dir: Path


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    sampling: SamplingConfig
    models: dict[str, ModelConfig]
    prompts: PromptsConfig
    attachments: AttachmentsConfig
    inbox: InboxConfig
    available_providers: set[str] = field(default_factory=set)


def _sampling_params(raw: dict) -> SamplingParams:
    return SamplingParams(
        temperature=float(raw["temperature"]),
        max_output_tokens=int(raw["max_output_tokens"]),
    )


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing.
    Logs providers without an API key but does not raise — the CLI decides
    whether the selected provider is usable.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    defaults_raw = raw["defaults"]
    defaults = DefaultsConfig(
        attempts=int(defaults_raw["attempts"]),
        max_attempts=int(defaults_raw["max_attempts"]),
        provider=str(defaults_raw["provider"]),
        output_dir=Path(defaults_raw["output_dir"]),
        pacing_sec=float(defaults_raw.get("pacing_sec", 0.5)),
        answer_prefix_len=int(defaults_raw.get("answer_prefix_len", 100)),
    )

    sampling_raw = raw["sampling"]
    sampling = SamplingConfig(
        first=_sampling_params(sampling_raw["first"]),
        retry=_sampling_params(sampling_raw["retry"]),
    )

    prompts_raw = raw["prompts"]
    prompts = PromptsConfig(
        system=prompts_raw["system"],
        verification=prompts_raw["verification"],
    )

    attachments_raw = raw.get("attachments", {})
    attachments = AttachmentsConfig(
        text_budget_bytes=int(attachments_raw.get("text_budget_bytes", 20000)),
        max_files=int(attachments_raw.get("max_files", 10)),
    )

    inbox_raw = raw.get("inbox", {})
    inbox_dir = Path(inbox_raw.get("dir", "./inbox"))
    inbox = InboxConfig(
        dir=inbox_dir,
        archive_dir=Path(inbox_raw.get("archive_dir", inbox_dir / "archive")),
    )

    models: dict[str, ModelConfig] = {}
    available_providers: set[str] = set()

    for provider_name, model_raw in raw["models"].items():
        model_cfg = ModelConfig(
            name=provider_name,
            sdk=model_raw["sdk"],
            model=model_raw["model"],
            api_key_env=model_raw["api_key_env"],
            timeout_sec=int(model_raw["timeout_sec"]),
            base_url=model_raw.get("base_url"),
        )
        models[provider_name] = model_cfg

        api_key = os.environ.get(model_raw["api_key_env"], "").strip()
        if api_key:
            available_providers.add(provider_name)
            logger.info("Provider available: %s", provider_name)
        else:
            logger.info(
                "Provider skipped (no API key): %s — set %s in .env",
                provider_name,
                model_raw["api_key_env"],
            )

    return AppConfig(
        defaults=defaults,
        sampling=sampling,
        models=models,
        prompts=prompts,
        attachments=attachments,
        inbox=inbox,
        available_providers=available_providers,
    )
