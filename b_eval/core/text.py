"""Terminal text helpers."""

import re

# ESC followed by either a single Fe byte or a full CSI sequence.
_ANSI_PATTERN = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


def strip_ansi(text: str) -> str:
    """Remove terminal control sequences from captured output."""
    return _ANSI_PATTERN.sub("", text)


def preview(text: str, limit: int = 200) -> str:
    return text[:limit]
