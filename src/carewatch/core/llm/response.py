"""Recovery of a JSON payload from free-form model output.

Models asked for "only JSON" still wrap it in prose or markdown fences, and
sometimes break lines inside string values. ``extract_json_object`` tries a
fixed sequence of cheap recoveries and gives up with ``None`` rather than
repairing the payload.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```")
_WHITESPACE_RUN = re.compile(r"\s+")


def _try_parse(candidate: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(candidate)
    except (json.JSONDecodeError, TypeError, ValueError):
        return False, None


def extract_json_object(text: str | None) -> Any | None:
    """Parse the JSON payload embedded in ``text``.

    Recovery order:
    1. the whole trimmed text;
    2. the interior of a fenced code block (optionally tagged ``json``);
    3. the span from the first ``{`` to the last ``}``;
    4. that span with every whitespace run collapsed to one space.

    Returns:
        The parsed value, or ``None`` if no step succeeds. Never raises.
    """
    if not text or not isinstance(text, str):
        return None

    trimmed = text.strip()
    logger.debug("Parsing model output: %.300s", trimmed)

    ok, parsed = _try_parse(trimmed)
    if ok:
        return parsed

    fenced = _FENCED_BLOCK.search(trimmed)
    if fenced:
        ok, parsed = _try_parse(fenced.group(1))
        if ok:
            return parsed

    first = trimmed.find("{")
    last = trimmed.rfind("}")
    if first != -1 and last > first:
        candidate = trimmed[first : last + 1]
        ok, parsed = _try_parse(candidate)
        if ok:
            return parsed
        ok, parsed = _try_parse(_WHITESPACE_RUN.sub(" ", candidate))
        if ok:
            return parsed

    logger.info("No JSON object recoverable from model output")
    return None
