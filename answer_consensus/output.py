"""Rich console output and markdown report for answer runs."""

import logging
import re
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from answer_consensus.models import Attempt, ConsensusResult, RunState, RunStatus

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

_NOT_SPECIFIED = "Not specified"
_NO_ANSWER = "(no FINAL ANSWER marker found)"


def _slug(text: str, max_len: int = 40) -> str:
    """Convert text to a filename-safe slug."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug[:max_len]


def consensus_heading(result: ConsensusResult) -> str:
    if result.is_consensus:
        return "CONSENSUS ANSWER"
    return "BEST ANSWER (Partial Agreement)"


def _answer_text(attempt: Attempt | None) -> str:
    if attempt is None or not attempt.parsed.answer:
        return _NO_ANSWER
    return attempt.parsed.answer


def print_attempt(attempt: Attempt) -> None:
    """Print one attempt as soon as it arrives."""
    confidence = attempt.parsed.confidence or _NOT_SPECIFIED
    console.print(
        Panel(
            Text(_answer_text(attempt)),
            title=f"[bold]Attempt {attempt.attempt_index}[/bold]",
            subtitle=f"Confidence: {escape(confidence)}",
            border_style="dim",
        )
    )


def print_consensus(result: ConsensusResult | None) -> None:
    """Print the consensus box: green when a majority agrees, yellow otherwise."""
    if result is None:
        return
    style = "green" if result.is_consensus else "yellow"
    console.print(Rule(f"[bold {style}]{consensus_heading(result)}[/bold {style}]"))
    console.print(
        Panel(
            Text(_answer_text(result.representative), style="bold"),
            subtitle=f"{result.agreement_count}/{result.total_attempts} agree",
            border_style=style,
        )
    )


def print_analysis(attempt: Attempt) -> None:
    """Print the reasoning that preceded the representative answer."""
    if attempt.parsed.analysis:
        console.print(Rule(f"[bold cyan]Analysis (attempt {attempt.attempt_index})[/bold cyan]"))
        console.print(Markdown(attempt.parsed.analysis))


def print_error(message: str, label: str = "Error") -> None:
    """Print a red-labelled message; the message text is never parsed as markup."""
    console.print(Text.assemble((f"{label}:", "bold red"), " ", str(message)))


def print_run_error(error: Exception, state: RunState) -> None:
    """Show the last error verbatim next to whatever completed before it."""
    print_error(str(error))
    console.print(
        f"[dim]{len(state.attempts)}/{state.total_attempts} attempt(s) completed before the failure.[/dim]"
    )


def _attempt_lines(attempt: Attempt) -> list[str]:
    lines = [
        f"### Attempt {attempt.attempt_index} — Confidence: {attempt.parsed.confidence or _NOT_SPECIFIED}",
        "",
    ]
    if attempt.parsed.analysis:
        lines += ["**Analysis:**", "", attempt.parsed.analysis, ""]
    lines += ["**Answer:**", "", attempt.parsed.answer or _NO_ANSWER, ""]
    return lines


def save_to_file(
    state: RunState,
    result: ConsensusResult | None,
    provider_label: str,
    output_dir: Path,
    slug_override: str | None = None,
) -> Path:
    """Save the run (consensus, every attempt, error if any) as a markdown file.

    Args:
        state: The finished or failed run.
        result: Consensus over ``state.attempts`` (None when there are none).
        provider_label: Provider and model shown in the header.
        output_dir: Directory to save the file in.
        slug_override: If provided, use this as the filename stem instead of
            deriving one from the question text. Useful for inbox mode.

    Returns:
        Path to the saved file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    question_text = state.question.text if state.question else ""
    source = state.question.source if state.question else ""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    slug = slug_override if slug_override is not None else _slug(question_text)
    filepath = output_dir / f"{timestamp}_{slug}.md"

    lines: list[str] = [
        f"# Answer Consensus: {question_text[:80]}",
        "",
        f"**Date:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"**Provider:** {provider_label}",
        f"**Attempts:** {len(state.attempts)}/{state.total_attempts}",
        f"**Status:** {state.status.value}",
        f"**Source:** {source}",
        "",
        "## Question",
        "",
        question_text,
        "",
        "---",
        "",
    ]

    if result is not None:
        lines += [
            f"## {consensus_heading(result)} ({result.agreement_count}/{result.total_attempts} agree)",
            "",
            _answer_text(result.representative),
            "",
        ]

    if state.status is RunStatus.FAILED and state.error is not None:
        lines += ["## Error", "", f"`{state.error}`", ""]

    lines += [f"## All Attempts ({len(state.attempts)})", ""]
    for attempt in state.attempts:
        lines += _attempt_lines(attempt)

    filepath.write_text("\n".join(lines), encoding="utf-8")
    logger.info("Report saved to: %s", filepath)
    return filepath
