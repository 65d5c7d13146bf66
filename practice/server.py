from __future__ import annotations

import argparse
import asyncio
import json
import logging
import random
from typing import Any, Dict, Optional

import websockets
from http import HTTPStatus

from practice.bots import baseline_strategy

LOGGER = logging.getLogger("practice_decider")

# A stand-in external decision service. It speaks the same decide/decision
# protocol WebSocketDecisionProvider uses, so tournaments can exercise the
# provider path without any third-party model behind it.


class PracticeServerError(Exception):
    def __init__(self, code: str, msg: str) -> None:
        super().__init__(msg)
        self.code = code
        self.msg = msg


async def _send_error(websocket: websockets.WebSocketServerProtocol, code: str, msg: str) -> None:
    await websocket.send(json.dumps({"type": "error", "code": code, "msg": msg}))


def answer_request(message: Any, rng: random.Random) -> Dict[str, Any]:
    if not isinstance(message, dict):
        raise PracticeServerError("BAD_SCHEMA", "Request must be a JSON object")
    if message.get("type") != "decide":
        raise PracticeServerError("BAD_TYPE", "Expected a decide request")
    if message.get("v") != 1:
        raise PracticeServerError("BAD_VERSION", "Only protocol version 1 is supported")
    request_id = message.get("request_id")
    if not isinstance(request_id, str) or not request_id:
        raise PracticeServerError("BAD_SCHEMA", "request_id is required")
    context = message.get("context")
    if not isinstance(context, dict):
        raise PracticeServerError("BAD_SCHEMA", "context must be an object")

    action, amount, reasoning = baseline_strategy(context, rng)
    return {
        "type": "decision",
        "request_id": request_id,
        "action": action,
        "amount": amount,
        "reasoning": reasoning,
    }


async def handle_connection(websocket: websockets.WebSocketServerProtocol, rng: random.Random) -> None:
    # One connection may carry any number of requests.
    try:
        async for raw in websocket:
            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                await _send_error(websocket, "BAD_JSON", "Request is not valid JSON")
                continue
            try:
                reply = answer_request(message, rng)
            except PracticeServerError as exc:
                LOGGER.warning("Rejected request: %s (%s)", exc.msg, exc.code)
                await _send_error(websocket, exc.code, exc.msg)
                continue
            LOGGER.debug("Decision %s for %s", reply["action"], message.get("context", {}).get("name"))
            await websocket.send(json.dumps(reply))
    except websockets.ConnectionClosed:
        LOGGER.debug("Client disconnected")


async def _process_request(path, request_headers):
    """Return a simple HTTP response for health checks."""

    upgrade_header = request_headers.get("Upgrade", "").lower()
    if upgrade_header == "websocket":
        return None  # let the WebSocket handshake continue

    if path in {"/", "/health", "/healthz"}:
        body = b"decision service running\n"
        status = HTTPStatus.OK
    else:
        body = b"not found\n"
        status = HTTPStatus.NOT_FOUND
    headers = [
        ("Content-Type", "text/plain; charset=utf-8"),
        ("Content-Length", str(len(body))),
    ]
    return status, headers, body


async def run_server(host: str, port: int, seed: Optional[int] = None) -> None:
    rng = random.Random(seed)

    async def _handler(ws):
        await handle_connection(ws, rng)

    async with websockets.serve(_handler, host, port, process_request=_process_request):
        LOGGER.info("Practice decision service listening on %s:%s", host, port)
        await asyncio.Future()


def main() -> None:
    parser = argparse.ArgumentParser(description="Baseline decision service for tournament AI seats")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=9876)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()

    asyncio.run(run_server(args.host, args.port, args.seed))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
