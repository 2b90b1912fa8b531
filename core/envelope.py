"""Inbound message unwrapping and outbound envelope shaping.

The reply shape depends only on whether the inbound payload carried both a
``jsonrpc`` and an ``id`` key; the detected intent never influences it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

_MISSING = object()

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602


@dataclass(frozen=True)
class InboundShape:
    """The two fields of the inbound payload the reply needs to echo."""

    jsonrpc: Any = _MISSING
    id: Any = _MISSING

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> "InboundShape":
        payload = payload or {}
        return cls(
            jsonrpc=payload.get("jsonrpc", _MISSING),
            id=payload.get("id", _MISSING),
        )

    @property
    def is_jsonrpc(self) -> bool:
        return self.jsonrpc is not _MISSING and self.id is not _MISSING


def extract_text(payload: Mapping[str, Any] | None) -> str:
    """Return the first part's text of a JSON-RPC message, else the ``content`` field."""

    text = extract_jsonrpc_text(payload)
    if text:
        return text
    content = (payload or {}).get("content")
    return content if isinstance(content, str) else ""


def extract_jsonrpc_text(payload: Mapping[str, Any] | None) -> Optional[str]:
    params = (payload or {}).get("params")
    if not isinstance(params, dict):
        return None
    message = params.get("message")
    if not isinstance(message, dict):
        return None
    parts = message.get("parts")
    if not isinstance(parts, list) or not parts:
        return None
    first = parts[0]
    if not isinstance(first, dict):
        return None
    text = first.get("text")
    return text if isinstance(text, str) else None


def respond(message: str, shape: InboundShape) -> Dict[str, Any]:
    """Wrap ``message`` in the envelope matching the inbound request."""

    if shape.is_jsonrpc:
        return {
            "jsonrpc": shape.jsonrpc,
            "id": shape.id,
            "result": {
                "message": {
                    "kind": "message",
                    "role": "assistant",
                    "parts": [{"kind": "text", "text": message}],
                }
            },
        }
    return {"status": "success", "response": message}


def jsonrpc_error(code: int, message: str, request_id: Any = _MISSING) -> Dict[str, Any]:
    body: Dict[str, Any] = {"jsonrpc": "2.0", "error": {"code": code, "message": message}}
    if request_id is not _MISSING:
        body["id"] = request_id
    return body


__all__ = [
    "INVALID_PARAMS",
    "INVALID_REQUEST",
    "InboundShape",
    "METHOD_NOT_FOUND",
    "PARSE_ERROR",
    "extract_jsonrpc_text",
    "extract_text",
    "jsonrpc_error",
    "respond",
]
