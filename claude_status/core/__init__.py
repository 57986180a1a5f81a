from claude_status.core.state import Config, CoreState, NoCredentialsError
from claude_status.core.thresholds import SEVERITY_COLORS, Severity, classify

__all__ = [
    "Config",
    "CoreState",
    "NoCredentialsError",
    "SEVERITY_COLORS",
    "Severity",
    "classify",
]
