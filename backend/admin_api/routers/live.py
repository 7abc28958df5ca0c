"""
Live lists over WebSocket.

Each message is the caller's full, ordered list (categories or menu items)
as JSON. The subscription lives exactly as long as the socket.

Close codes:
    4001: missing, invalid or expired token
"""

from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect

from admin_api.container import AppContainer
from admin_api.repositories.base import TenantCollectionRepository
from shared.config.logging import get_logger
from shared.security.auth import identity_from_token

logger = get_logger(__name__)

router = APIRouter(tags=["live"])

# Client messages beyond heartbeats are ignored; this bounds what we read
MAX_MESSAGE_SIZE = 1024


@router.websocket("/ws/categories")
async def categories_websocket(websocket: WebSocket, token: str = Query(default="")):
    container: AppContainer = websocket.app.state.container
    await _serve_live_list(websocket, token, container, container.categories)


@router.websocket("/ws/menu-items")
async def menu_items_websocket(websocket: WebSocket, token: str = Query(default="")):
    container: AppContainer = websocket.app.state.container
    await _serve_live_list(websocket, token, container, container.menu_items)


async def _serve_live_list(
    websocket: WebSocket,
    token: str,
    container: AppContainer,
    repo: TenantCollectionRepository,
) -> None:
    path = websocket.url.path
    try:
        identity = identity_from_token(token) if token else None
    except HTTPException as e:
        await websocket.close(code=4001, reason=str(e.detail))
        return

    decision = await container.gate.protected_route(identity, path)
    if not decision.allowed:
        await websocket.close(code=4001, reason="Authentication required")
        return

    await websocket.accept()

    async def push(entities: list) -> None:
        await websocket.send_json([e.model_dump(by_alias=True, mode="json") for e in entities])

    async with repo.watch(identity.uid, push):
        logger.info("Live list connected", tenant_id=identity.uid, path=path)
        try:
            while True:
                data = await websocket.receive_text()
                if len(data) > MAX_MESSAGE_SIZE:
                    await websocket.close(code=1009, reason="Message too large")
                    break
                if data == "ping":
                    await websocket.send_text("pong")
        except WebSocketDisconnect:
            pass
        finally:
            logger.info("Live list disconnected", tenant_id=identity.uid, path=path)
