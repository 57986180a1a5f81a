from claude_status.credentials.store import (
    Credentials,
    CredentialsError,
    CredentialsIOError,
    CredentialsParseError,
    MissingOAuthError,
    MissingTokenError,
    default_credentials_path,
    expand_path,
    load_credentials,
    resolve_credentials_path,
)

__all__ = [
    "Credentials",
    "CredentialsError",
    "CredentialsIOError",
    "CredentialsParseError",
    "MissingOAuthError",
    "MissingTokenError",
    "default_credentials_path",
    "expand_path",
    "load_credentials",
    "resolve_credentials_path",
]
