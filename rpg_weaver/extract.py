"""Recover a JSON value from raw model output.

Models are told to return bare JSON but sometimes wrap it in prose or code
fences. extract_json() tries the whole text, then the span from the first
"{" to the last "}". It does not handle several top-level objects.
"""

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def _loads(text: str) -> Any | None:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, RecursionError):
        return None


def extract_json(text: str) -> Any | None:
    """Return the parsed value, or None when nothing usable is found.

    A literal JSON null also yields None.
    """
    value = _loads(text)
    if value is not None:
        return value

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        logger.warning("No JSON object found in model output (len=%d)", len(text))
        return None

    value = _loads(text[start:end + 1])
    if value is None:
        logger.warning("Model output is not valid JSON (len=%d)", len(text))
    return value
