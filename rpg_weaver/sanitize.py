"""Free-text sanitisation shared by request validation and output coercion."""

import re

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def sanitize(text: str) -> str:
    """Strip ASCII control characters and surrounding whitespace.

    "  Mira\\x00 Stoneveil\\n" → "Mira Stoneveil"
    """
    return _CONTROL_CHARS.sub("", text).strip()


def is_non_empty_string(value: object, min_length: int = 1) -> bool:
    """True if value is a str whose trimmed length is at least min_length."""
    return isinstance(value, str) and len(value.strip()) >= min_length
