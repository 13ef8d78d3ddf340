"""Inbox folder scanning, question-file frontmatter, and archive logic."""

import shutil
from datetime import datetime
from pathlib import Path

import frontmatter


def ensure_dirs(inbox_dir: Path, archive_dir: Path) -> None:
    """Create inbox and archive directories if they don't exist."""
    inbox_dir.mkdir(parents=True, exist_ok=True)
    archive_dir.mkdir(parents=True, exist_ok=True)


def scan_inbox(inbox_dir: Path) -> list[Path]:
    """Return all .md files in inbox_dir, sorted by mtime ascending (oldest first)."""
    files = list(inbox_dir.glob("*.md"))
    return sorted(files, key=lambda p: p.stat().st_mtime)


def parse_file(file_path: Path) -> tuple[str, dict]:
    """Parse a question file with optional YAML frontmatter.

    Recognised frontmatter keys:
        attempts: int, number of attempts for this question.
        provider: str, provider name from settings.yaml.
        attach: str or list of str, file paths relative to the question file.

    Returns:
        (question_text, metadata). Only recognised keys appear in metadata,
        already converted; ``attach`` becomes a list of absolute Paths.

    Raises:
        ValueError: ``attempts`` is not an integer.
        yaml.YAMLError: Malformed frontmatter.
    """
    post = frontmatter.load(str(file_path))
    question_text = post.content.strip()

    metadata: dict = {}
    if "attempts" in post.metadata:
        try:
            metadata["attempts"] = int(post.metadata["attempts"])
        except (TypeError, ValueError) as exc:
            raise ValueError(f"attempts must be an integer, got {post.metadata['attempts']!r}") from exc
    if "provider" in post.metadata:
        metadata["provider"] = str(post.metadata["provider"])
    if "attach" in post.metadata:
        attach = post.metadata["attach"]
        if isinstance(attach, str):
            attach = [attach]
        metadata["attach"] = [(file_path.parent / str(p)).resolve() for p in attach]
    return question_text, metadata


def archive_file(file_path: Path, archive_dir: Path, *, failed: bool = False) -> Path:
    """Move file to archive_dir with a timestamp prefix.

    Args:
        file_path: Source file to archive.
        archive_dir: Destination directory.
        failed: If True, prefix filename with "FAILED_".

    Returns:
        Path to the archived file.
    """
    timestamp = datetime.now().strftime("%Y-%m-%dT%H%M")
    prefix = "FAILED_" if failed else ""
    dest = archive_dir / f"{prefix}{timestamp}_{file_path.name}"
    shutil.move(str(file_path), str(dest))
    return dest
