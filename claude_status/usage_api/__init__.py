from claude_status.usage_api.client import (
    AuthError,
    NetworkError,
    ParseError,
    UsageApiError,
    UsageClient,
    fetch_usage,
)
from claude_status.usage_api.models import UsageData, UsagePeriod

__all__ = [
    "AuthError",
    "NetworkError",
    "ParseError",
    "UsageApiError",
    "UsageClient",
    "UsageData",
    "UsagePeriod",
    "fetch_usage",
]
