from __future__ import annotations

import logging

from fastapi import APIRouter, Query, WebSocket

from pairchat.application.ports.auth import Principal, TokenVerifier
from pairchat.bootstrap import Container

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

AUTH_FAILED_CLOSE_CODE = 4001


def _handshake_token(websocket: WebSocket, query_token: str | None) -> str | None:
    """`?token=` for browsers, `Authorization: Bearer` for everything else."""
    if query_token:
        return query_token
    scheme, _, credentials = websocket.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials
    return None


async def _authenticate(verifier: TokenVerifier, token: str | None) -> Principal | None:
    if not token:
        return None
    try:
        return await verifier.verify(token)
    except Exception:
        logger.debug("WS auth failed", exc_info=True)
        return None


@router.websocket("/ws/chat")
async def ws_chat(
    websocket: WebSocket,
    token: str | None = Query(None),
) -> None:
    container: Container = websocket.app.state.container
    principal = await _authenticate(container.verifier, _handshake_token(websocket, token))
    if principal is None:
        await websocket.close(code=AUTH_FAILED_CLOSE_CODE, reason="Authentication failed")
        return

    await container.gateway.serve(websocket, principal.user_id)
