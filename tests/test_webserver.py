"""
Test cases for the liveness routes and the webhook endpoint
"""
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp.test_utils import TestClient, TestServer

from bot import build_web_app


@pytest.fixture
async def client():
    async with TestClient(TestServer(build_web_app())) as c:
        yield c


async def test_root_is_alive(client):
    resp = await client.get("/")
    assert resp.status == 200
    assert await resp.text() == "Bot is running ✅"


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status == 200
    assert (await resp.json())["status"] == "ok"


async def test_webhook_forwards_updates(monkeypatch):
    import webserver

    ptb_app = MagicMock()
    ptb_app.process_update = AsyncMock()
    app = webserver.build_webhook_app(ptb_app)
    # Telegram registration is not part of this test.
    app.on_startup.clear()
    app.on_shutdown.clear()
    monkeypatch.setattr(webserver.Update, "de_json", MagicMock(return_value="update"))

    async with TestClient(TestServer(app)) as c:
        resp = await c.post("/webhook", json={"update_id": 1})
        assert resp.status == 200
        ptb_app.process_update.assert_awaited_once_with("update")

        resp = await c.post("/webhook", data="not json")
        assert resp.status == 400
