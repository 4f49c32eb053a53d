"""Inline tool markers for providers that only return free text.

Grammar: ``[TOOL:<tool-id>:<json-object>]``. The tool id may not contain
``:`` or ``]``; the payload must decode to a JSON object. Anything else is
left in the text untouched.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

TOOL_MARKER_PATTERN = re.compile(r"\[TOOL:([^:\]\s]+):(\{.*?\})\]", re.DOTALL)


@dataclass
class ToolMarker:
    tool_id: str
    params: Dict[str, Any]
    raw: str


def parse_tool_markers(text: str) -> List[ToolMarker]:
    """Return every well-formed marker in order of appearance"""
    markers = []
    for match in TOOL_MARKER_PATTERN.finditer(text or ""):
        try:
            params = json.loads(match.group(2))
        except json.JSONDecodeError:
            logger.warning(f"Ignoring tool marker with invalid JSON: {match.group(0)[:80]}")
            continue
        if not isinstance(params, dict):
            continue
        markers.append(ToolMarker(tool_id=match.group(1), params=params, raw=match.group(0)))
    return markers


def replace_marker(text: str, marker: ToolMarker, replacement: str) -> str:
    """Replace the first occurrence of a marker's raw text"""
    return text.replace(marker.raw, replacement, 1)
