"""Helpers to parse Responses API outputs."""

from typing import Any, Dict, Optional

FALLBACK_REPLY = "Sorry, I couldn't generate a reply."


def _field(obj: Any, name: str) -> Any:
    """Read `name` from an SDK object or a plain dict."""
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def extract_text(response: Any) -> Optional[str]:
    """Return the text of the first output_text block, if any."""
    for item in _field(response, "output") or []:
        if _field(item, "type") != "message":
            continue
        for content in _field(item, "content") or []:
            if _field(content, "type") == "output_text":
                text = _field(content, "text")
                if text is not None:
                    return text
    return _field(response, "output_text") or None


def extract_reply(response: Any) -> str:
    """Return the reply text, or the fixed apology when no non-blank text exists."""
    text = extract_text(response)
    return text if text and text.strip() else FALLBACK_REPLY


def extract_usage(response: Any) -> Dict[str, Optional[int]]:
    """Return token usage information from the response, if present."""
    usage = _field(response, "usage")
    return {
        "input_tokens": _field(usage, "input_tokens") if usage else None,
        "output_tokens": _field(usage, "output_tokens") if usage else None,
    }
