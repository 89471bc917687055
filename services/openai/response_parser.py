"""Helpers to parse Responses API outputs."""

import json
from typing import Any, Dict, List, Optional


def _field(item: Any, name: str, default: Any = None) -> Any:
    """Read `name` from an SDK object or a plain dict."""
    if isinstance(item, dict):
        return item.get(name, default)
    return getattr(item, name, default)


def iter_function_calls(response: Any) -> List[Dict[str, str]]:
    """Return every function call in the response output, in order."""
    calls = []
    for item in _field(response, "output", None) or []:
        if _field(item, "type") != "function_call":
            continue
        calls.append(
            {
                "name": _field(item, "name", ""),
                "arguments": _field(item, "arguments", "") or "{}",
                "call_id": _field(item, "call_id", "") or _field(item, "id", ""),
            }
        )
    return calls


def parse_function_call(response: Any, *, tool_name: str) -> Dict[str, Any]:
    """Return the decoded arguments of the first call to `tool_name`."""
    for call in iter_function_calls(response):
        if call["name"] == tool_name:
            return json.loads(call["arguments"])
    raise RuntimeError(f"No function_call output for '{tool_name}' found in Responses API output.")


def extract_text(response: Any) -> str:
    """Return the text output, preferring the SDK's aggregated `output_text`."""
    text = _field(response, "output_text", None)
    if isinstance(text, str) and text:
        return text
    parts = []
    for item in _field(response, "output", None) or []:
        if _field(item, "type") != "message":
            continue
        for content in _field(item, "content", None) or []:
            if _field(content, "type") == "output_text":
                parts.append(_field(content, "text", "") or "")
    return "".join(parts)


def extract_usage(response: Any) -> Dict[str, Optional[int]]:
    """Return token usage information from the response, if present."""
    usage = _field(response, "usage", None)
    return {
        "input_tokens": _field(usage, "input_tokens", None) if usage else None,
        "output_tokens": _field(usage, "output_tokens", None) if usage else None,
    }
