"""Utilities to build input payloads for the Responses API."""

from typing import Any, Dict, List, Optional


def text_message(role: str, text: str) -> Dict[str, Any]:
    """Return a single text message entry."""
    return {"type": "message", "role": role, "content": [{"type": "input_text", "text": text}]}


def build_inputs(
    system_prompt: str,
    user_prompt: str,
    *,
    image_reference: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Build the input array: system prompt, user prompt, then the image if any."""
    inputs: List[Dict[str, Any]] = [
        text_message("system", system_prompt),
        text_message("user", user_prompt),
    ]
    if image_reference:
        inputs.append(
            {"type": "message", "role": "user", "content": [{"type": "input_image", "image_url": image_reference}]}
        )
    return inputs
