"""Click CLI — orchestrates config loading, provider selection, attempts, consensus, and output."""

import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

import click
import yaml
from dotenv import load_dotenv
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from answer_consensus.attachments import load_attachments
from answer_consensus.inbox import archive_file, ensure_dirs, parse_file, scan_inbox
from answer_consensus.models import Question, RunState
from answer_consensus.output import (
    console,
    print_analysis,
    print_attempt,
    print_consensus,
    print_error,
    print_run_error,
    save_to_file,
)
from answer_consensus.providers.anthropic import AnthropicProvider
from answer_consensus.providers.base import AIProvider, ProviderError
from answer_consensus.providers.gemini import GeminiProvider
from answer_consensus.providers.openai_provider import OpenAIProvider
from answer_consensus.runner import AttemptRunner, ValidationError
from config.config_loader import AppConfig, load_config

logger = logging.getLogger(__name__)

PROVIDER_CLASSES: dict[str, type[AIProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "gemini": GeminiProvider,
}


class RunFailed(Exception):
    """A run ended without completing; the cause was already shown to the user."""


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _build_provider(config: AppConfig, name: str) -> AIProvider:
    """Instantiate the named provider from its settings.yaml entry.

    Raises:
        click.UsageError: Unknown provider name or SDK.
        AuthError: API key env var not set.
    """
    if name not in config.models:
        raise click.UsageError(
            f"Unknown provider '{name}'. Configured: {', '.join(sorted(config.models))}"
        )
    model_cfg = config.models[name]
    if model_cfg.sdk not in PROVIDER_CLASSES:
        raise click.UsageError(f"Provider '{name}' uses unsupported sdk '{model_cfg.sdk}'")
    return PROVIDER_CLASSES[model_cfg.sdk](model_cfg)


def _resolve_attempts(requested: int | None, config: AppConfig) -> int:
    """Requested count or the configured default, capped at max_attempts."""
    attempts = requested if requested is not None else config.defaults.attempts
    if attempts > config.defaults.max_attempts:
        raise click.UsageError(
            f"--attempts {attempts} exceeds max_attempts ({config.defaults.max_attempts})"
        )
    return attempts


async def _run_single(
    question: Question,
    config: AppConfig,
    provider: AIProvider,
    attempts: int,
    attachment_paths: Sequence[Path],
    output_dir: Path,
    save: bool,
    slug_override: str | None = None,
) -> RunState:
    """Run one question end to end and print/save the outcome.

    Raises:
        RunFailed: Validation or provider failure (already reported).
    """
    if len(attachment_paths) > config.attachments.max_files:
        raise click.UsageError(
            f"Too many attachments: {len(attachment_paths)} (max {config.attachments.max_files})"
        )
    attachments = load_attachments(attachment_paths, config.attachments.text_budget_bytes)

    runner = AttemptRunner(
        provider=provider,
        prompts=config.prompts,
        sampling=config.sampling,
        pacing_sec=config.defaults.pacing_sec,
        answer_prefix_len=config.defaults.answer_prefix_len,
    )
    provider_label = f"{provider.name()} ({provider.model_string()})"

    console.print(f"\n[bold cyan]Answer Consensus[/bold cyan] — {attempts} attempts via {escape(provider_label)}")
    if attachments:
        console.print(f"Attachments: {escape(', '.join(a.name for a in attachments))}")
    console.print(
        f"Question: [italic]{escape(question.text[:80])}{'...' if len(question.text) > 80 else ''}[/italic]\n"
    )

    error: Exception | None = None
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(f"Analyzing... (0/{attempts})", total=None)

        def on_attempt(state: RunState) -> None:
            progress.update(task, description=f"Analyzing... ({len(state.attempts)}/{attempts})")
            print_attempt(state.attempts[-1])

        try:
            await runner.run(question, attempts, attachments=attachments, on_attempt=on_attempt)
        except ValidationError as exc:
            print_error(str(exc))
            raise RunFailed(str(exc)) from exc
        except ProviderError as exc:
            error = exc

    state = runner.state
    result = runner.consensus()
    print_consensus(result)
    if result is not None and result.representative is not None:
        print_analysis(result.representative)

    if error is not None:
        print_run_error(error, state)

    if save:
        saved_path = save_to_file(state, result, provider_label, output_dir, slug_override=slug_override)
        console.print(f"\n[dim]Saved to: {escape(str(saved_path))}[/dim]")

    if error is not None:
        raise RunFailed(str(error)) from error
    return state


async def _run_inbox(
    config: AppConfig,
    inbox_dir: Path,
    archive_dir: Path,
    attempts_cli: int | None,
    provider_cli: str | None,
    output_dir: Path,
) -> None:
    """Process all .md question files in the inbox folder.

    Precedence for per-file settings: CLI flag > frontmatter > config default.
    """
    ensure_dirs(inbox_dir, archive_dir)
    files = scan_inbox(inbox_dir)

    if not files:
        click.echo("No files in inbox.")
        return

    for file_path in files:
        try:
            question_text, meta = parse_file(file_path)
            provider_name = provider_cli or meta.get("provider") or config.defaults.provider
            requested = attempts_cli if attempts_cli is not None else meta.get("attempts")
            attempts = _resolve_attempts(requested, config)
            provider = _build_provider(config, provider_name)
            await _run_single(
                question=Question(text=question_text, source=str(file_path)),
                config=config,
                provider=provider,
                attempts=attempts,
                attachment_paths=meta.get("attach", []),
                output_dir=output_dir,
                save=True,
                slug_override=file_path.stem,
            )
            archived = archive_file(file_path, archive_dir)
            click.echo(f"Processed: {file_path.name} (archived: {archived.name})")
        except (RunFailed, ProviderError, click.UsageError, OSError, ValueError, yaml.YAMLError) as e:
            logger.error("Failed: %s -- %s", file_path.name, e)
            archive_file(file_path, archive_dir, failed=True)


@click.command()
@click.argument("question", required=False)
@click.option("--file", "question_file", type=click.Path(exists=True), help="Read question from .md file")
@click.option("--attempts", default=None, type=click.IntRange(min=1),
              help="Number of attempts (default: from config)")
@click.option("--provider", "provider_name", default=None, help="Provider name from settings.yaml (default: from config)")
@click.option("--attach", "attach_paths", multiple=True, type=click.Path(exists=True, dir_okay=False),
              help="Attach a file to the question (repeatable)")
@click.option("--output", "output_path", default=None, help="Output directory (default: from config)")
@click.option("--no-save", is_flag=True, default=False, help="Do not write a markdown report")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
@click.option("--inbox", "use_inbox", is_flag=True, default=False,
              help="Process all .md files in inbox folder")
@click.option("--inbox-dir", "inbox_dir_override", default=None,
              help="Override inbox folder path (default: from config)")
def main(
    question: str | None,
    question_file: str | None,
    attempts: int | None,
    provider_name: str | None,
    attach_paths: tuple[str, ...],
    output_path: str | None,
    no_save: bool,
    verbose: bool,
    use_inbox: bool,
    inbox_dir_override: str | None,
) -> None:
    """Answer Consensus -- ask a model several times and keep the majority answer.

    \b
    Examples:
      answer-consensus "How do I list running containers with docker?"
      answer-consensus "Which uv command adds a dev dependency?" --attempts 5
      answer-consensus --file question.md --attach data.csv
      answer-consensus --inbox --provider claude
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8", errors="replace")

    load_dotenv()
    _setup_logging(verbose)

    try:
        config = load_config()
    except FileNotFoundError as exc:
        print_error(str(exc), label="Config error")
        sys.exit(1)

    effective_output = Path(output_path) if output_path else config.defaults.output_dir

    if use_inbox:
        inbox_dir = Path(inbox_dir_override) if inbox_dir_override else config.inbox.dir
        asyncio.run(
            _run_inbox(
                config=config,
                inbox_dir=inbox_dir,
                archive_dir=config.inbox.archive_dir,
                attempts_cli=attempts,
                provider_cli=provider_name,
                output_dir=effective_output,
            )
        )
        return

    meta: dict = {}
    if question_file:
        try:
            question_text, meta = parse_file(Path(question_file))
        except (ValueError, yaml.YAMLError) as exc:
            print_error(f"Invalid question file {question_file}: {exc}")
            sys.exit(1)
        question_source = question_file
    elif question:
        question_text = question
        question_source = "cli"
    else:
        print_error("Provide a QUESTION argument, --file, or --inbox.")
        sys.exit(1)

    # CLI flags win over question-file frontmatter
    effective_attempts = _resolve_attempts(
        attempts if attempts is not None else meta.get("attempts"), config
    )
    attachment_paths = [Path(p) for p in attach_paths] or meta.get("attach", [])
    try:
        provider = _build_provider(config, provider_name or meta.get("provider") or config.defaults.provider)
    except ProviderError as exc:
        print_error(f"{exc}. Check API keys in .env.")
        sys.exit(1)

    try:
        asyncio.run(
            _run_single(
                question=Question(text=question_text, source=question_source),
                config=config,
                provider=provider,
                attempts=effective_attempts,
                attachment_paths=attachment_paths,
                output_dir=effective_output,
                save=not no_save,
            )
        )
    except RunFailed:
        sys.exit(1)


if __name__ == "__main__":
    main()
