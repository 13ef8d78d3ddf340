"""Prompt construction for each attempt."""

from collections.abc import Sequence

from answer_consensus.attachments import Attachment
from answer_consensus.models import AttemptConfig, Question
from config.config_loader import PromptsConfig


def build_attachment_block(attachments: Sequence[Attachment]) -> str:
    """Render attached files as delimited blocks. Empty string when none."""
    if not attachments:
        return ""
    parts = ["ATTACHED FILES:"]
    for att in attachments:
        parts.append(f"--- {att.name} ({att.media_type}) ---\n{att.text_summary}")
    return "\n\n".join(parts)


def build_prompt(
    question: Question,
    attempt: AttemptConfig,
    prompts: PromptsConfig,
    attachments: Sequence[Attachment] = (),
) -> str:
    """Build the full prompt text for one attempt.

    Attempts after the first get the verification directive appended so the
    model re-derives its answer instead of repeating itself.
    """
    sections = [prompts.system.strip()]

    attachment_block = build_attachment_block(attachments)
    if attachment_block:
        sections.append(attachment_block)

    sections.append(f"QUESTION:\n{question.text}")

    if attempt.attempt_index > 1:
        sections.append(prompts.verification.strip())

    return "\n\n".join(sections)
