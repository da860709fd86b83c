"""
Recover SWOT quadrants from a free-form model answer.

The resume flow asks Gemini for "a SWOT analysis of this resume" and gets back
prose with loosely formatted headings. This module finds each quadrant's
heading, captures the text up to the next quadrant heading, strips markdown
noise and falls back to a fixed sentence whenever nothing usable is found.
It never raises.
"""

import logging
import re
from typing import Dict, Optional, Tuple

from engine.schemas import SWOT_FIELDS, SwotText

logger = logging.getLogger(__name__)

MAX_FIELD_CHARS = 400
MIN_FIELD_CHARS = 10

DEFAULT_SWOT: Dict[str, str] = {
    "strengths": "Strong technical skills and experience based on resume analysis",
    "weaknesses": "Areas for improvement identified from resume review",
    "opportunities": "Career growth opportunities based on current profile",
    "threats": "Market challenges and competitive factors to consider",
}

LABEL_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "strengths": (r"strengths?", r"strong\s+points?"),
    "weaknesses": (r"weakness(?:es)?", r"areas\s+for\s+improvement", r"limitations?"),
    "opportunities": (r"opportunit(?:y|ies)", r"potential", r"growth\s+areas?"),
    "threats": (r"threats?", r"challenges?", r"risks?", r"obstacles?"),
}

# "## Strengths" heading: any whitespace may follow the label.
_HASH_LEAD = r"[ \t]*#+[ \t]*(?:\*\*)?"
# Closing emphasis and colon, then whitespace or end of text.
_TAIL = r"(?:\*\*)?:?(?:\*\*)?(?=\s|$)"
# "**2. Weaknesses:**", "- Threats:", "Strengths": decoration "**", "- ", "2. ".
_ITEM_LEAD = r"[ \t]*(?:\*\*)?(?:(?:[-*•]|\d+[.)])[ \t]+)?(?:\*\*)?"
# A list item only opens a section when the label takes a colon or ends the line.
_ITEM_TAIL = r"(?:(?:\*\*)?:(?:\*\*)?(?=\s|$)|(?:\*\*)?[ \t]*$)"

BOLD_RE = re.compile(r"\*\*(.*?)\*\*")
BULLET_RE = re.compile(r"^[ \t]*[-*•][ \t]*", re.MULTILINE)
BRACKET_RE = re.compile(r"\[(.*?)\]")


def _alternation(labels) -> str:
    return "(?:" + "|".join(labels) + ")"


def _heading_line(labels: str) -> str:
    return "^(?:" + _HASH_LEAD + labels + _TAIL + "|" + _ITEM_LEAD + labels + _ITEM_TAIL + ")"


def _compile_patterns():
    patterns = {}
    for field in SWOT_FIELDS:
        own = _alternation(LABEL_SYNONYMS[field])
        others = _alternation(
            label for other in SWOT_FIELDS if other != field for label in LABEL_SYNONYMS[other]
        )
        patterns[field] = {
            "line_heading": re.compile(_heading_line(own), re.IGNORECASE | re.MULTILINE),
            "inline_heading": re.compile(r"(?<!\w)" + own + _TAIL, re.IGNORECASE),
            # Another quadrant's heading, or any markdown heading line.
            "boundary": re.compile(
                r"^[ \t]*#|" + _heading_line(others),
                re.IGNORECASE | re.MULTILINE,
            ),
        }
    return patterns


_PATTERNS = _compile_patterns()


def clean_section(text: str) -> str:
    """Strip bullets, bold markers and square brackets until nothing changes."""
    current = text
    while True:
        cleaned = BOLD_RE.sub(r"\1", current)
        cleaned = BULLET_RE.sub("", cleaned)
        cleaned = BRACKET_RE.sub(r"\1", cleaned)
        cleaned = cleaned.strip()
        if cleaned == current:
            return cleaned
        current = cleaned


def _capture(text: str, field: str) -> Optional[str]:
    patterns = _PATTERNS[field]

    # Prefer a heading that starts its own line; fall back to the first inline label.
    heading = patterns["line_heading"].search(text) or patterns["inline_heading"].search(text)
    if heading is None:
        return None

    start = heading.end()
    first_break = text.find("\n", start)
    if first_break == -1:
        end = len(text)
    else:
        boundary = patterns["boundary"].search(text, first_break + 1)
        end = boundary.start() if boundary else len(text)

    body = clean_section(text[start:end])[:MAX_FIELD_CHARS]
    if len(body) <= MIN_FIELD_CHARS:
        return None
    return body


def extract_swot(text: str) -> SwotText:
    """
    Build a SwotText from a narrative report.

    Each quadrant is extracted on its own; a miss or an unexpected error in one
    quadrant only swaps in that quadrant's default sentence.
    """
    text = text or ""
    values: Dict[str, str] = {}

    for field in SWOT_FIELDS:
        try:
            captured = _capture(text, field)
        except Exception:  # noqa: BLE001
            logger.warning("SWOT extraction failed for %s; using default.", field, exc_info=True)
            captured = None

        if captured is None:
            logger.debug("No usable %s section found; using default.", field)
            values[field] = DEFAULT_SWOT[field]
        else:
            values[field] = captured

    return SwotText(**values)
