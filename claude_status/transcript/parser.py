"""Context-window usage from the newest Claude Code session transcript.

Claude Code writes one JSONL file per session under
``~/.claude/projects/<project>/``.  Each assistant record carries the token
count of the *whole* conversation so far, so the last usage record in the
file is the current context size. Later records replace earlier totals
rather than adding to them.
"""

from __future__ import annotations

import logging
import stat
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ValidationError

from claude_status.config import settings
from claude_status.credentials.store import expand_path

logger = logging.getLogger(__name__)

CONTEXT_WINDOW_DEFAULT = 200_000
TRANSCRIPT_SUFFIX = ".jsonl"


class TranscriptError(Exception):
    """Base class for transcript failures."""


class NoTranscriptsError(TranscriptError):
    """Raised when there is no session transcript to read."""

    def __init__(self, projects_dir: Path) -> None:
        self.projects_dir = projects_dir
        super().__init__(f"No transcript files found under {projects_dir}")


class TranscriptReadError(TranscriptError):
    """Raised when a transcript directory or file cannot be read."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read transcript {path}: {reason}")


@dataclass
class ContextInfo:
    """Context window consumption of the latest session."""

    context_pct: float
    context_tokens: int
    context_window_size: int = CONTEXT_WINDOW_DEFAULT
    model_name: str | None = None


# ── Record schema ────────────────────────────────────────────────────────────


class _Usage(BaseModel):
    input_tokens: int | None = None
    cache_creation_input_tokens: int | None = None
    cache_read_input_tokens: int | None = None

    @property
    def context_tokens(self) -> int:
        return (
            (self.input_tokens or 0)
            + (self.cache_creation_input_tokens or 0)
            + (self.cache_read_input_tokens or 0)
        )


class _Message(BaseModel):
    model: str | None = None
    usage: _Usage | None = None


class TranscriptEntry(BaseModel):
    type: str | None = None
    message: _Message | None = None


# ── Discovery ────────────────────────────────────────────────────────────────


def find_latest_transcript(projects_dir: Path) -> Path:
    """Return the most recently modified ``*.jsonl`` across all projects.

    Only files directly inside each project directory are considered.
    """
    try:
        st = projects_dir.stat()
    except (FileNotFoundError, NotADirectoryError):
        raise NoTranscriptsError(projects_dir) from None
    except OSError as e:
        raise TranscriptReadError(projects_dir, str(e)) from e
    if not stat.S_ISDIR(st.st_mode):
        raise NoTranscriptsError(projects_dir)

    latest_path: Path | None = None
    latest_mtime: float | None = None

    try:
        project_dirs = [d for d in projects_dir.iterdir() if d.is_dir()]
    except OSError as e:
        raise TranscriptReadError(projects_dir, str(e)) from e

    for proj_dir in project_dirs:
        try:
            candidates = [
                f for f in proj_dir.iterdir()
                if f.suffix == TRANSCRIPT_SUFFIX and f.is_file()
            ]
        except OSError as e:
            raise TranscriptReadError(proj_dir, str(e)) from e

        for candidate in candidates:
            try:
                mtime = candidate.stat().st_mtime
            except OSError:
                # Vanished between listing and stat
                continue
            if latest_mtime is None or mtime > latest_mtime:
                latest_mtime = mtime
                latest_path = candidate

    if latest_path is None:
        raise NoTranscriptsError(projects_dir)
    return latest_path


# ── Parsing ──────────────────────────────────────────────────────────────────


def _iter_entries(file_path: Path) -> Iterator[TranscriptEntry]:
    """Yield records in file order, skipping blank and malformed lines."""
    try:
        with open(file_path, "r", encoding="utf-8", errors="replace") as f:
            for lineno, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    yield TranscriptEntry.model_validate_json(line)
                except ValidationError:
                    logger.debug("Skipping unparseable line %d in %s", lineno, file_path)
    except OSError as e:
        raise TranscriptReadError(file_path, str(e)) from e


def context_from_transcript(
    file_path: Path,
    window_size: int = CONTEXT_WINDOW_DEFAULT,
) -> ContextInfo:
    """Derive ContextInfo from one transcript file."""
    context_tokens = 0
    last_model: str | None = None

    for entry in _iter_entries(file_path):
        if entry.type != "assistant" or entry.message is None:
            continue
        if entry.message.model is not None:
            last_model = entry.message.model
        if entry.message.usage is not None:
            context_tokens = entry.message.usage.context_tokens

    return ContextInfo(
        context_pct=min(100.0, context_tokens / window_size * 100.0),
        context_tokens=context_tokens,
        context_window_size=window_size,
        model_name=last_model,
    )


class TranscriptAggregator:
    """Reads context usage from the newest transcript under a Claude dir."""

    def __init__(
        self,
        claude_dir: Path | str | None = None,
        window_size: int = CONTEXT_WINDOW_DEFAULT,
    ) -> None:
        if claude_dir is None:
            claude_dir = settings.claude_dir
        self.claude_dir = expand_path(claude_dir) if isinstance(claude_dir, str) else claude_dir
        self.window_size = window_size

    @property
    def projects_dir(self) -> Path:
        return self.claude_dir / "projects"

    def read_latest(self) -> ContextInfo:
        """Locate the newest transcript and compute its context usage.

        Raises:
            NoTranscriptsError: no projects dir or no ``.jsonl`` files.
            TranscriptReadError: a directory or the transcript is unreadable.
        """
        path = find_latest_transcript(self.projects_dir)
        logger.debug("Reading context from %s", path)
        return context_from_transcript(path, self.window_size)


def read_context(claude_dir: Path | None = None) -> ContextInfo:
    """Shortcut for ``TranscriptAggregator(claude_dir).read_latest()``."""
    return TranscriptAggregator(claude_dir).read_latest()
