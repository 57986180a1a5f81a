"""Usage and context-window state for a Claude desktop status indicator."""

__version__ = "0.1.0"
