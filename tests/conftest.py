"""Shared test fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest


@pytest.fixture
def fake_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``Path.home()`` at an empty temp directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    return home


def write_credentials(path: Path, oauth: dict[str, Any] | None = None, **top: Any) -> Path:
    """Write a credentials document. ``oauth=None`` omits the OAuth section."""
    doc: dict[str, Any] = dict(top)
    if oauth is not None:
        doc["claudeAiOauth"] = oauth
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(doc), encoding="utf-8")
    return path


def assistant(
    input_tokens: int | None = None,
    cache_creation: int | None = None,
    cache_read: int | None = None,
    model: str | None = "claude-sonnet-4-6",
    with_usage: bool = True,
) -> dict[str, Any]:
    """Build an assistant transcript record."""
    message: dict[str, Any] = {"role": "assistant"}
    if model is not None:
        message["model"] = model
    if with_usage:
        usage: dict[str, Any] = {"output_tokens": 10}
        if input_tokens is not None:
            usage["input_tokens"] = input_tokens
        if cache_creation is not None:
            usage["cache_creation_input_tokens"] = cache_creation
        if cache_read is not None:
            usage["cache_read_input_tokens"] = cache_read
        message["usage"] = usage
    return {"type": "assistant", "message": message}


def write_transcript(path: Path, lines: list[dict[str, Any] | str]) -> Path:
    """Write JSONL; dicts are serialized, strings are written verbatim."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for line in lines:
            f.write((line if isinstance(line, str) else json.dumps(line)) + "\n")
    return path


@pytest.fixture
def claude_dir(tmp_path: Path) -> Path:
    """An empty ``.claude`` directory with a ``projects`` folder."""
    d = tmp_path / ".claude"
    (d / "projects").mkdir(parents=True)
    return d
