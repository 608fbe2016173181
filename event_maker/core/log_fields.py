"""Log Fields - helpers that keep structured log extras short and safe."""

MAX_PREVIEW_CHARS = 80


def preview(value: object, limit: int = MAX_PREVIEW_CHARS) -> str:
    """Truncated single-line repr of an input for postmortem logs."""
    text = value if isinstance(value, str) else repr(value)
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
