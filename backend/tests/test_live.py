"""
WebSocket live list tests.
"""

import pytest
from starlette.websockets import WebSocketDisconnect

from shared.security.auth import sign_identity_token


def token_for(uid: str) -> str:
    return sign_identity_token(uid, f"{uid}@example.com")


class TestLiveLists:
    def test_missing_token_is_rejected(self, client):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect("/ws/categories"):
                pass
        assert exc_info.value.code == 4001

    def test_invalid_token_is_rejected(self, client):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect("/ws/menu-items?token=garbage"):
                pass
        assert exc_info.value.code == 4001

    def test_initial_list_then_updates(self, client, container, owner_headers):
        client.post("/api/categories", json={"name": "Starters"}, headers=owner_headers)

        with client.websocket_connect(f"/ws/categories?token={token_for('owner-1')}") as ws:
            initial = ws.receive_json()
            client.post("/api/categories", json={"name": "Mains"}, headers=owner_headers)
            updated = ws.receive_json()

        assert [c["name"] for c in initial] == ["Starters"]
        assert [c["name"] for c in updated] == ["Starters", "Mains"]
        assert container.store.listener_count == 0

    def test_other_tenants_writes_are_not_pushed(self, client, owner_headers):
        with client.websocket_connect(f"/ws/menu-items?token={token_for('owner-2')}") as ws:
            assert ws.receive_json() == []
            client.post("/api/categories", json={"name": "Mains"}, headers=owner_headers)
            ws.send_text("ping")
            assert ws.receive_text() == "pong"

    def test_oversized_message_closes_connection(self, client):
        with client.websocket_connect(f"/ws/categories?token={token_for('owner-1')}") as ws:
            ws.receive_json()
            ws.send_text("x" * 2000)
            with pytest.raises(WebSocketDisconnect) as exc_info:
                ws.receive_text()
        assert exc_info.value.code == 1009
