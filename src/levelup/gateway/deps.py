"""依赖注入模块 -- 通过 FastAPI Depends 注入 app.state 上的实例

实例在 lifespan 中初始化/清理。
"""

from fastapi import Request

from levelup.core.session import SessionStore
from levelup.core.store import StoreGroup
from levelup.engine.lifecycle import TaskLifecycleService
from levelup.engine.notifier import Notifier


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_lifecycle(request: Request) -> TaskLifecycleService:
    return request.app.state.lifecycle


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier
