"""Turn attached files into short text summaries the prompt can carry."""

import logging
import mimetypes
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_TEXT_BUDGET = 20000

_TEXT_MEDIA_TYPES = {"application/json", "text/csv"}
_BINARY_KINDS = {"application/pdf": "PDF"}


@dataclass(frozen=True)
class Attachment:
    name: str
    media_type: str
    text_summary: str


def _is_text(media_type: str) -> bool:
    return media_type.startswith("text/") or media_type in _TEXT_MEDIA_TYPES


def _binary_kind(media_type: str) -> str | None:
    if media_type.startswith("image/"):
        return "Image"
    return _BINARY_KINDS.get(media_type)


def summarize_attachment(
    name: str,
    media_type: str,
    data: bytes,
    text_budget: int = DEFAULT_TEXT_BUDGET,
) -> Attachment:
    """Summarize one file for the prompt.

    Text-like files are decoded and truncated to ``text_budget`` bytes; PDFs and
    images become a placeholder with their size; anything else is labelled
    unsupported.
    """
    kind = _binary_kind(media_type)
    if _is_text(media_type):
        summary = data[:text_budget].decode("utf-8", errors="replace")
        if len(data) > text_budget:
            summary += f"\n[... truncated, {len(data) - text_budget} more bytes]"
    elif kind:
        summary = f"[{kind} file: {name}, {len(data)} bytes - content not extracted]"
    else:
        summary = f"[Unsupported file type: {media_type}]"
    return Attachment(name=name, media_type=media_type, text_summary=summary)


def media_type_for(path: Path) -> str:
    """Declared media type from the file extension only."""
    return mimetypes.guess_type(path.name)[0] or "application/octet-stream"


def load_attachments(
    paths: Iterable[Path],
    text_budget: int = DEFAULT_TEXT_BUDGET,
) -> list[Attachment]:
    """Read and summarize each file.

    Raises:
        FileNotFoundError: If a path does not exist.
    """
    attachments: list[Attachment] = []
    for path in paths:
        data = path.read_bytes()
        media_type = media_type_for(path)
        attachments.append(summarize_attachment(path.name, media_type, data, text_budget))
        logger.info("Attached %s (%s, %d bytes)", path.name, media_type, len(data))
    return attachments
