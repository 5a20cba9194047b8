"""Gateway 测试 fixture -- 手动初始化 app.state（绕过 lifespan）"""

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from levelup.core.session import SessionStore


@pytest_asyncio.fixture
async def test_app(monkeypatch, tmp_db_path, store_group, lifecycle, notifier):
    monkeypatch.setenv("LEVELUP_DB_PATH", str(tmp_db_path))

    from levelup.gateway.main import create_app

    app = create_app()

    app.state.store_group = store_group
    app.state.lifecycle = lifecycle
    app.state.notifier = notifier
    app.state.session_store = SessionStore()
    app.state.scheduler = None

    return app


@pytest_asyncio.fixture
async def client(test_app) -> AsyncClient:
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as ac:
        yield ac
