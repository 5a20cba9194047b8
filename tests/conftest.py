"""全局 pytest 配置 -- 临时 SQLite 数据库 + 引擎服务 fixture"""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from pathlib import Path

import pytest_asyncio
from levelup.core.models import (
    AssigneeScope,
    Space,
    Task,
    User,
    UserSpaceStats,
)
from levelup.core.store import StoreGroup, create_store_group
from levelup.engine.engagement import EngagementService
from levelup.engine.ledger import XpLedger
from levelup.engine.lifecycle import TaskLifecycleService
from levelup.engine.notifier import Notifier
from levelup.notify import LogTransport
from ulid import ULID

SEED_TIME = datetime(2024, 3, 1, tzinfo=UTC)


class Seeder:
    """测试数据构造器：直接写库并提交"""

    def __init__(self, stores: StoreGroup) -> None:
        self._stores = stores

    async def user(self, user_id: str, display_name: str = "") -> User:
        user = User(user_id=user_id, chat_id=f"chat-{user_id}", display_name=display_name)
        await self._stores.space_store.save_user(user)
        await self._stores.conn.commit()
        return user

    async def space(
        self,
        space_id: str = "space-1",
        timezone: str = "UTC",
        members: tuple[str, ...] = (),
    ) -> Space:
        space = Space(space_id=space_id, name=space_id, timezone=timezone, created_at=SEED_TIME)
        await self._stores.space_store.create_space(space)
        for user_id in members:
            if await self._stores.space_store.get_user(user_id) is None:
                await self.user(user_id)
            await self._stores.space_store.add_member(space_id, user_id, SEED_TIME)
        await self._stores.conn.commit()
        return space

    async def task(
        self,
        space_id: str = "space-1",
        created_by: str = "alice",
        title: str = "Wash dishes",
        difficulty: int = 3,
        due_at: datetime | None = None,
        recurrence=None,
        assignee_scope: AssigneeScope = AssigneeScope.USER,
        assignee_user_id: str | None = None,
        is_paused: bool = False,
        reminder_sent: bool = False,
        due_has_time: bool = True,
    ) -> Task:
        task = Task(
            task_id=str(ULID()),
            space_id=space_id,
            title=title,
            difficulty=difficulty,
            due_at=due_at,
            is_paused=is_paused,
            reminder_sent=reminder_sent,
            due_has_time=due_has_time,
            recurrence=recurrence,
            assignee_scope=assignee_scope,
            assignee_user_id=assignee_user_id,
            created_by=created_by,
            created_at=SEED_TIME,
            updated_at=SEED_TIME,
        )
        await self._stores.task_store.create_task(task)
        await self._stores.conn.commit()
        return task

    async def stats(
        self,
        space_id: str,
        user_id: str,
        total_xp: int,
        level: int = 1,
        updated_at: datetime = SEED_TIME,
    ) -> UserSpaceStats:
        stats = UserSpaceStats(
            space_id=space_id,
            user_id=user_id,
            total_xp=total_xp,
            level=level,
            updated_at=updated_at,
        )
        await self._stores.stats_store.upsert_stats(stats)
        await self._stores.conn.commit()
        return stats


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "sqlite" / "test.db"


@pytest_asyncio.fixture
async def store_group(tmp_db_path: Path) -> AsyncGenerator[StoreGroup, None]:
    """提供已初始化的 StoreGroup"""
    stores = await create_store_group(str(tmp_db_path))
    yield stores
    await stores.close()


@pytest_asyncio.fixture
async def seed(store_group: StoreGroup) -> Seeder:
    return Seeder(store_group)


@pytest_asyncio.fixture
async def transport() -> LogTransport:
    return LogTransport()


@pytest_asyncio.fixture
async def notifier(store_group: StoreGroup, transport: LogTransport) -> Notifier:
    return Notifier(store_group, transport)


@pytest_asyncio.fixture
async def ledger(store_group: StoreGroup) -> XpLedger:
    return XpLedger(store_group)


@pytest_asyncio.fixture
async def lifecycle(
    store_group: StoreGroup, ledger: XpLedger, notifier: Notifier
) -> TaskLifecycleService:
    return TaskLifecycleService(store_group, ledger, notifier)


@pytest_asyncio.fixture
async def engagement(
    store_group: StoreGroup, ledger: XpLedger, notifier: Notifier
) -> EngagementService:
    return EngagementService(store_group, ledger, notifier)
