"""FastAPI lifespan 测试

测试内容：
1. 启动时 DB / 通道 / 服务初始化
2. 调度器按 LEVELUP_SCHEDULER_ENABLED 启停
3. 关闭时调度器停止
"""

import pytest
from levelup.gateway.main import create_app
from levelup.notify import LogTransport


@pytest.fixture
def lifespan_env(monkeypatch, tmp_path):
    monkeypatch.setenv("LEVELUP_DB_PATH", str(tmp_path / "sqlite" / "app.db"))
    monkeypatch.setenv("LEVELUP_TRANSPORT_MODE", "log")
    monkeypatch.setenv("LEVELUP_SUMMARY_TIMEZONE", "UTC")
    monkeypatch.setenv("LEVELUP_SCHEDULER_RUN_ON_START", "0")
    return monkeypatch


class TestLifespan:
    async def test_services_initialized(self, lifespan_env, tmp_path):
        lifespan_env.setenv("LEVELUP_SCHEDULER_ENABLED", "0")
        app = create_app()

        async with app.router.lifespan_context(app):
            assert app.state.store_group.conn is not None
            assert isinstance(app.state.transport, LogTransport)
            assert app.state.lifecycle is not None
            assert app.state.engagement is not None
            assert app.state.session_store is not None
            assert app.state.scheduler is None

        assert (tmp_path / "sqlite" / "app.db").exists()

    async def test_scheduler_started_and_stopped(self, lifespan_env):
        lifespan_env.setenv("LEVELUP_SCHEDULER_ENABLED", "1")
        app = create_app()

        async with app.router.lifespan_context(app):
            scheduler = app.state.scheduler
            assert scheduler.running is True
            assert set(scheduler.jobs) == {"reminders", "expiration", "summaries"}

        assert scheduler.running is False
