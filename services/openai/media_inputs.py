"""Utilities to build the Responses API input array from conversation turns."""

from typing import Any, Dict, List, Optional, Sequence

from models.generation_models import ContextTurn

DEFAULT_IMAGE_TYPE = "image/jpeg"
_KNOWN_IMAGE_TYPES = ("image/png", "image/gif", "image/webp")


def image_media_type(data_uri: str) -> str:
    """Infer the image MIME type from a data URI prefix, defaulting to JPEG."""
    for media_type in _KNOWN_IMAGE_TYPES:
        if data_uri.startswith(f"data:{media_type}"):
            return media_type
    return DEFAULT_IMAGE_TYPE


def image_payload(data_uri: str) -> str:
    """Return only the base64 payload after the data URI separator."""
    _, _, payload = data_uri.partition(",")
    return payload


def to_image_data_url(data_uri: str) -> Optional[str]:
    """Normalize a stored data URI into the form sent as `input_image`."""
    payload = image_payload(data_uri)
    if not payload:
        return None
    return f"data:{image_media_type(data_uri)};base64,{payload}"


def build_turn_content(turn: ContextTurn) -> List[Dict[str, Any]]:
    """Compose the content parts for one turn.

    Text is included when non-empty; an image is included only for user turns
    carrying image data.
    """
    parts: List[Dict[str, Any]] = []
    if turn.content:
        text_type = "output_text" if turn.role == "assistant" else "input_text"
        parts.append({"type": text_type, "text": turn.content})
    if turn.role == "user" and turn.image_data:
        image_url = to_image_data_url(turn.image_data)
        if image_url:
            parts.append({"type": "input_image", "image_url": image_url})
    return parts


def build_inputs(system_prompt: str, turns: Sequence[ContextTurn]) -> List[Dict[str, Any]]:
    """Build the Responses API input array: system message, then each turn in order.

    Turns that end up with no content parts are skipped; the API rejects
    empty messages.
    """
    inputs: List[Dict[str, Any]] = [
        {
            "type": "message",
            "role": "system",
            "content": [{"type": "input_text", "text": system_prompt}],
        },
    ]
    for turn in turns:
        content = build_turn_content(turn)
        if not content:
            continue
        inputs.append({"type": "message", "role": turn.role, "content": content})
    return inputs
