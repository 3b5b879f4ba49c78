"""Interpretation of raw provider output into outlines and chapter text."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional

from ..errors import OutlineParseError
from ..models import OutlineDocument

LOGGER = logging.getLogger(__name__)

# Greedy: first "{" through the last "}" in the response.
_BRACE_SPAN = re.compile(r"\{[\s\S]*\}")


def parse_outline(raw_text: str) -> OutlineDocument:
    """Parse an outline response, tolerating commentary around a single JSON object.

    The whole text is tried first; failing that, the widest ``{...}`` span is
    parsed. Nothing beyond "is a JSON object" is checked.
    """

    text = (raw_text or "").strip()

    data = _loads_object(text)
    if data is None:
        match = _BRACE_SPAN.search(text)
        if match:
            data = _loads_object(match.group(0))

    if data is None:
        LOGGER.warning("Unable to parse outline output as JSON: %s", text[:500])
        raise OutlineParseError(raw_text)

    return OutlineDocument.from_dict(data)


def extract_chapter_text(raw_text: str) -> str:
    return (raw_text or "").strip()


def _loads_object(text: str) -> Optional[Dict[str, Any]]:
    if not text:
        return None
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None
