"""Load the OAuth credentials Claude Code keeps in ~/.claude.

The file is a small JSON document; only the ``claudeAiOauth`` section is
read.  Every call is a single attempt; errors go straight to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CREDENTIALS_PATH = Path(".claude") / ".credentials.json"


class CredentialsError(Exception):
    """Base class for credential loading failures."""


class CredentialsIOError(CredentialsError):
    """Raised when the credentials file cannot be read."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read credentials file {path}: {reason}")


class CredentialsParseError(CredentialsError):
    """Raised when the credentials file is not the expected JSON document."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Failed to parse credentials JSON in {path}: {detail}")


class MissingOAuthError(CredentialsError):
    """Raised when the file has no OAuth section."""

    def __init__(self) -> None:
        super().__init__("Missing OAuth credentials in file")


class MissingTokenError(CredentialsError):
    """Raised when the OAuth section has no usable access token."""

    def __init__(self) -> None:
        super().__init__("Missing access token")


@dataclass(frozen=True)
class Credentials:
    """An access token plus the plan label derived from the subscription."""

    access_token: str
    plan_name: str | None = None

    def __repr__(self) -> str:
        return f"Credentials(access_token='***', plan_name={self.plan_name!r})"


# ── File schema ──────────────────────────────────────────────────────────────


class _OAuthSection(BaseModel):
    access_token: str | None = Field(default=None, alias="accessToken")
    subscription_type: str | None = Field(default=None, alias="subscriptionType")


class _CredentialsFile(BaseModel):
    claude_ai_oauth: _OAuthSection | None = Field(default=None, alias="claudeAiOauth")


# ── Helpers ──────────────────────────────────────────────────────────────────


def expand_path(path: str) -> Path:
    """Expand a leading ``~/`` (or a bare ``~``) to the home directory.

    Only the current user's home is understood; ``~user`` forms and
    environment variables are left untouched.
    """
    if path.startswith("~/"):
        return Path.home() / path[2:]
    if path == "~":
        return Path.home()
    return Path(path)


def default_credentials_path() -> Path:
    """Return ``~/.claude/.credentials.json``."""
    return Path.home() / DEFAULT_CREDENTIALS_PATH


def resolve_credentials_path(path: str | None) -> Path:
    return default_credentials_path() if path is None else expand_path(path)


def plan_from_subscription(subscription: str | None) -> str | None:
    """Map a raw subscription identifier to ``"Max"``, ``"Pro"`` or None.

    Matching is a case-sensitive substring test, so ``"MAX_PLAN"`` has no
    plan.
    """
    if subscription is None:
        return None
    if "max" in subscription:
        return "Max"
    if "pro" in subscription:
        return "Pro"
    return None


# ── Public API ───────────────────────────────────────────────────────────────


def load_credentials(path: str | None = None) -> Credentials:
    """Load and validate credentials.

    Args:
        path: Override location. ``~`` is expanded; None means the default
              ``~/.claude/.credentials.json``.

    Raises:
        CredentialsIOError, CredentialsParseError, MissingOAuthError,
        MissingTokenError
    """
    file_path = resolve_credentials_path(path)

    try:
        contents = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CredentialsIOError(file_path, str(e)) from e

    try:
        document = _CredentialsFile.model_validate_json(contents)
    except ValidationError as e:
        raise CredentialsParseError(file_path, str(e)) from e

    oauth = document.claude_ai_oauth
    if oauth is None:
        raise MissingOAuthError()
    if not oauth.access_token:
        raise MissingTokenError()

    creds = Credentials(
        access_token=oauth.access_token,
        plan_name=plan_from_subscription(oauth.subscription_type),
    )
    logger.info("Loaded credentials from %s (plan=%s)", file_path, creds.plan_name or "unknown")
    return creds
