import json
import re
from typing import Any, Dict, List, Mapping

from engine.schemas import SWOT_FIELDS

# Conservative sanitization: strip tags and control chars.
TAG_RE = re.compile(r"<[^>]+>")
CTRL_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F]")

WHITESPACE_RE = re.compile(r"\s+")

# Length limits for user input (characters).
MAX_SWOT_FIELD_CHARS = 2500
MAX_RESUME_CHARS = 20000


def sanitize_text(text: str, max_len: int) -> str:
    if text is None:
        return ""
    t = str(text)
    t = TAG_RE.sub("", t)
    t = CTRL_RE.sub("", t)
    t = t.replace("\u2028", " ").replace("\u2029", " ")
    t = t.strip()
    if len(t) > max_len:
        t = t[:max_len].rstrip() + "…"
    return t


def missing_swot_fields(form: Mapping[str, Any]) -> List[str]:
    """Names of SWOT fields that are empty after trimming, in canonical order."""
    return [f for f in SWOT_FIELDS if not str(form.get(f) or "").strip()]


def normalize_inputs_for_cache_key(inputs: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a normalized, deterministic version of inputs for caching.
    Must NOT include api_key.
    """
    def norm(s: Any, max_len: int) -> str:
        return WHITESPACE_RE.sub(" ", sanitize_text("" if s is None else str(s), max_len=max_len)).strip().lower()

    normalized: Dict[str, Any] = {f: norm(inputs.get(f, ""), MAX_SWOT_FIELD_CHARS) for f in SWOT_FIELDS}
    normalized["model"] = norm(inputs.get("model", ""), 80)
    return normalized


def extract_first_json_object(text: str) -> str:
    """
    Extract the first top-level JSON object from a text blob.
    Deterministic scan that respects brace depth and strings.
    """
    if not text:
        raise ValueError("Empty model output.")

    start = text.find("{")
    if start == -1:
        raise ValueError("No JSON object start '{' found in model output.")

    in_str = False
    esc = False
    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if in_str:
            if esc:
                esc = False
            elif ch == "\\":
                esc = True
            elif ch == '"':
                in_str = False
        else:
            if ch == '"':
                in_str = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start : i + 1]

    raise ValueError("Unclosed JSON object in model output.")


def safe_json_loads(s: str) -> Dict[str, Any]:
    obj = json.loads(s)
    if not isinstance(obj, dict):
        raise ValueError("Expected a JSON object.")
    return obj
