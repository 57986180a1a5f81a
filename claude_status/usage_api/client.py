"""httpx-based client for the Anthropic OAuth usage endpoint.

``fetch`` returns a fresh UsageData or raises AuthError / NetworkError /
ParseError.  No retries; the caller decides what to do next.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from claude_status import __version__
from claude_status.config import settings
from claude_status.usage_api.models import ApiUsageResponse, UsageData

logger = logging.getLogger(__name__)

OAUTH_BETA_HEADER = "oauth-2025-04-20"
USER_AGENT = f"claude-status/{__version__}"


class UsageApiError(Exception):
    """Base class for usage endpoint failures."""


class AuthError(UsageApiError):
    """Raised on HTTP 401: the token is invalid or expired."""

    def __init__(self) -> None:
        super().__init__("Authentication failed (401)")


class NetworkError(UsageApiError):
    """Raised when the request could not complete."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Network error: {detail}")


class ParseError(UsageApiError):
    """Raised when the response body is not the expected document."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Failed to parse response: {detail}")


class UsageClient:
    """Synchronous httpx client for the usage endpoint."""

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._url = url or settings.usage_api_url
        self._timeout = timeout if timeout is not None else settings.request_timeout
        self._transport = transport

    @property
    def timeout(self) -> float:
        return self._timeout

    @staticmethod
    def _headers(access_token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {access_token}",
            "anthropic-beta": OAUTH_BETA_HEADER,
            "User-Agent": USER_AGENT,
        }

    def fetch(self, access_token: str) -> UsageData:
        """GET the usage document and build UsageData from it."""
        try:
            with httpx.Client(
                timeout=self._timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                resp = client.get(self._url, headers=self._headers(access_token))
        except httpx.TimeoutException as e:
            raise NetworkError(f"request timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise NetworkError(str(e) or e.__class__.__name__) from e
        except (httpx.InvalidURL, UnicodeEncodeError) as e:
            # Header values must be ASCII
            raise NetworkError(f"could not build request: {e}") from e

        if resp.status_code == 401:
            logger.warning("Usage request rejected with 401, token invalid or expired")
            raise AuthError()
        if resp.status_code >= 400:
            raise NetworkError(f"HTTP {resp.status_code}: {resp.text[:200]}")

        try:
            parsed = ApiUsageResponse.model_validate_json(resp.content)
        except ValidationError as e:
            raise ParseError(str(e)) from e

        return parsed.to_usage_data()


def fetch_usage(access_token: str, timeout: float | None = None) -> UsageData:
    """Module-level shortcut using the configured endpoint."""
    return UsageClient(timeout=timeout).fetch(access_token)
