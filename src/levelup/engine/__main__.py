"""CLI 入口模块 -- python -m levelup.engine <command>

支持的命令：
  sweep  执行一次过期周期任务扫描
"""

import asyncio
import sys

from levelup.core.config import get_db_path


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print("用法: python -m levelup.engine <command>")
        print("命令:")
        print("  sweep  执行一次过期周期任务扫描")
        sys.exit(1)

    command = sys.argv[1]

    if command == "sweep":
        asyncio.run(run_sweep())
    else:
        print(f"未知命令: {command}")
        print("可用命令: sweep")
        sys.exit(1)


async def run_sweep() -> None:
    """执行一次过期扫描（过期流程不发送消息，使用 LogTransport）"""
    from levelup.core.store import create_store_group
    from levelup.notify import LogTransport
    from .ledger import XpLedger
    from .lifecycle import TaskLifecycleService
    from .notifier import Notifier

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")

    store_group = await create_store_group(db_path)
    try:
        service = TaskLifecycleService(
            store_group,
            XpLedger(store_group),
            Notifier(store_group, LogTransport()),
        )
        result = await service.process_expired_recurring_tasks()
        print(
            f"扫描完成: 扣分 {result.expired}，重新排期 {result.rescheduled}，"
            f"删除 {result.deleted}"
        )
    finally:
        await store_group.close()


if __name__ == "__main__":
    main()
