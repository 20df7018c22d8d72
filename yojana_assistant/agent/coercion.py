"""
Model Output Coercion
Turns untrusted model text into a dict with at least a "message" field
"""
import json
import re
from typing import Any, Dict, Optional

_FENCE = re.compile(r"```(?:json|JSON)?[ \t]*\n?")
_DECODER = json.JSONDecoder()


def strip_code_fences(text: str) -> str:
    return _FENCE.sub("", text).strip()


def _as_object(value: Any) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError("model output is not a JSON object")
    message = value.get("message")
    if message is None:
        message = value.get("response", "")
    result = dict(value)
    result["message"] = message if isinstance(message, str) else json.dumps(message, ensure_ascii=False)
    return result


def _first_object(text: str) -> Optional[Dict[str, Any]]:
    """Decode the first JSON object embedded in text, if any"""
    index = text.find("{")
    while index != -1:
        try:
            value, _ = _DECODER.raw_decode(text, index)
        except (ValueError, RecursionError):
            value = None
        if isinstance(value, dict):
            return value
        index = text.find("{", index + 1)
    return None


def coerce_model_output(raw: Any) -> Dict[str, Any]:
    """
    Parse model output with a fallback ladder:
    strict JSON, then the first embedded {...} object, then the raw text
    as the message.
    Never raises.
    """
    if not isinstance(raw, str):
        raw = "" if raw is None else str(raw)

    cleaned = strip_code_fences(raw)

    try:
        return _as_object(json.loads(cleaned))
    except (ValueError, RecursionError):
        pass

    embedded = _first_object(cleaned)
    if embedded is not None:
        return _as_object(embedded)

    return {"message": raw.strip()}
