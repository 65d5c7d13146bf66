from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Dict, Optional

import websockets

from holdem.errors import ProviderFailure

LOGGER = logging.getLogger("ai.provider")

PROTOCOL_VERSION = 1


class DecisionProvider:
    """Anything that can answer a decision request with {action, amount, reasoning}.

    Implementations may be slow or unreliable; DecisionEngine bounds every call
    with a timeout and falls back to the rule-based model on any failure.
    """

    name = "provider"

    async def request_decision(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError


def build_request(context: Dict[str, Any], prompt: str, request_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "type": "decide",
        "v": PROTOCOL_VERSION,
        "request_id": request_id or uuid.uuid4().hex,
        "context": context,
        "prompt": prompt,
    }


def parse_decision(raw: Any, request_id: Optional[str] = None) -> Dict[str, Any]:
    """Validate a provider reply and reduce it to {action, amount, reasoning}."""
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        try:
            message = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ProviderFailure(f"Provider sent invalid JSON: {exc}") from exc
    else:
        message = raw
    if not isinstance(message, dict):
        raise ProviderFailure("Provider reply must be a JSON object")

    msg_type = message.get("type", "decision")
    if msg_type == "error":
        raise ProviderFailure(f"Provider error {message.get('code')}: {message.get('msg')}")
    if msg_type != "decision":
        raise ProviderFailure(f"Unexpected provider message type {msg_type!r}")
    if request_id is not None and message.get("request_id") not in (None, request_id):
        raise ProviderFailure("Provider answered a different request")

    action = message.get("action")
    if not isinstance(action, str) or not action.strip():
        raise ProviderFailure("Provider reply is missing an action")
    amount = message.get("amount")
    if amount is not None:
        if isinstance(amount, bool) or not isinstance(amount, (int, float)):
            raise ProviderFailure(f"Provider amount must be a number, got {amount!r}")
        amount = int(amount)
    reasoning = message.get("reasoning")
    return {
        "action": action.strip().lower(),
        "amount": amount,
        "reasoning": str(reasoning) if reasoning else "No reasoning provided",
    }


class WebSocketDecisionProvider(DecisionProvider):
    """Sends one `decide` request per connection and waits for the `decision` reply."""

    name = "websocket"

    def __init__(self, url: str, open_timeout: float = 5.0) -> None:
        self.url = url
        self.open_timeout = open_timeout

    async def request_decision(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        request = build_request(payload.get("context", {}), payload.get("prompt", ""), payload.get("request_id"))
        async with websockets.connect(self.url, open_timeout=self.open_timeout) as ws:
            await ws.send(json.dumps(request))
            LOGGER.debug("Sent decision request %s to %s", request["request_id"], self.url)
            raw = await ws.recv()
        return parse_decision(raw, request["request_id"])
