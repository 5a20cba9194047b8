"""FastAPI 应用主文件

app 创建 + lifespan 管理：DB 初始化/关闭 + 消息通道 + 引擎服务 + 后台调度 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from levelup.core.config import get_db_path
from levelup.core.session import SessionStore
from levelup.core.store import create_store_group
from levelup.engine.engagement import EngagementService
from levelup.engine.ledger import XpLedger
from levelup.engine.lifecycle import TaskLifecycleService
from levelup.engine.notifier import Notifier
from levelup.notify import create_transport, load_transport_config
from levelup.scheduler.config import load_scheduler_config
from levelup.scheduler.runner import start_scheduler

from .middleware.logging_config import setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .routes import health, pokes, session, tasks

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化 Store / 通道 / 服务 / 调度器，关闭时按逆序清理"""
    # 启动：初始化 Store
    store_group = await create_store_group(get_db_path())
    app.state.store_group = store_group

    # 消息通道
    transport_config = load_transport_config()
    transport = create_transport(transport_config)
    app.state.transport = transport
    log.info("transport_initialized", mode=transport_config.mode)

    # 引擎服务：同一进程内共享一个 XpLedger
    notifier = Notifier(store_group, transport)
    ledger = XpLedger(store_group)
    app.state.notifier = notifier
    app.state.lifecycle = TaskLifecycleService(store_group, ledger, notifier)
    app.state.engagement = EngagementService(store_group, ledger, notifier)
    app.state.session_store = SessionStore()

    scheduler_config = load_scheduler_config()
    app.state.scheduler = None
    if scheduler_config.enabled:
        app.state.scheduler = start_scheduler(
            scheduler_config,
            store_group,
            app.state.lifecycle,
            app.state.engagement,
            notifier,
        )
    else:
        log.info("scheduler_disabled")

    yield

    # 关闭：先停调度器，再关通道与数据库连接
    if app.state.scheduler is not None:
        await app.state.scheduler.stop()
    await transport.aclose()
    await store_group.close()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="LevelUp Engine",
        version="0.1.0",
        description="LevelUp 任务生命周期与通知调度 API",
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)

    # 初始化日志
    setup_logging()

    # 注册路由
    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(session.router, tags=["session"])
    app.include_router(pokes.router, tags=["pokes"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
