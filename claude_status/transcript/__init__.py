from claude_status.transcript.parser import (
    CONTEXT_WINDOW_DEFAULT,
    ContextInfo,
    NoTranscriptsError,
    TranscriptAggregator,
    TranscriptError,
    TranscriptReadError,
    context_from_transcript,
    find_latest_transcript,
    read_context,
)

__all__ = [
    "CONTEXT_WINDOW_DEFAULT",
    "ContextInfo",
    "NoTranscriptsError",
    "TranscriptAggregator",
    "TranscriptError",
    "TranscriptReadError",
    "context_from_transcript",
    "find_latest_transcript",
    "read_context",
]
