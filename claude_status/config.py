from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {
        "env_prefix": "CLAUDE_STATUS_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    # Refresh cadence for the host's timer (seconds)
    update_interval: int = 30

    # Color thresholds (percent), expected ascending but not enforced
    yellow_threshold: int = 25
    orange_threshold: int = 50
    red_threshold: int = 75

    # Usage endpoint
    usage_api_url: str = "https://api.anthropic.com/api/oauth/usage"
    request_timeout: float = 10.0  # seconds, applies to connect + read

    # Local Claude Code files
    credentials_path: str | None = None  # None = ~/.claude/.credentials.json
    claude_dir: str = "~/.claude"

    # Logging
    log_level: str = "INFO"


settings = Settings()
