"""Notifier -- user_id 到消息通道的尽力投递

解析用户 chat_id 后调用 MessageTransport；任何失败都记录日志并返回 False，
通知失败从不影响已提交的状态变更。
"""

import structlog
from levelup.core.models.space import User
from levelup.core.store import StoreGroup
from levelup.notify import messages
from levelup.notify.transport import MessageTransport

log = structlog.get_logger()


class Notifier:
    """尽力而为的用户通知"""

    def __init__(self, store_group: StoreGroup, transport: MessageTransport) -> None:
        self._stores = store_group
        self._transport = transport

    async def notify_user(self, user_id: str, text: str) -> bool:
        """向用户发送消息，返回是否投递成功"""
        user = await self._stores.space_store.get_user(user_id)
        if user is None:
            log.warning("notify_user_not_found", user_id=user_id)
            return False
        return await self.send(user, text)

    async def send(self, user: User, text: str) -> bool:
        """向已加载的用户发送消息"""
        try:
            sent = await self._transport.send_message(user.chat_id, text)
        except Exception as e:
            log.error(
                "notify_transport_error",
                user_id=user.user_id,
                error_type=type(e).__name__,
                error=str(e),
            )
            return False

        if not sent:
            log.info("notify_not_delivered", user_id=user.user_id)
        return bool(sent)

    async def send_poke(self, from_user_id: str, to_user_id: str) -> bool:
        """戳一下：接收人关闭 poke_enabled 时不发送"""
        settings = await self._stores.settings_store.get_settings(to_user_id)
        if not settings.poke_enabled:
            log.info("poke_disabled", from_user_id=from_user_id, to_user_id=to_user_id)
            return False

        sender = await self._stores.space_store.get_user(from_user_id)
        from_name = (sender.display_name if sender else "") or "Someone"
        return await self.notify_user(to_user_id, messages.poke(from_name))

    async def notify_assignee_changed(
        self,
        task_title: str,
        space_name: str,
        actor_name: str,
        prev_assignee_id: str | None,
        next_assignee_id: str | None,
    ) -> None:
        """执行人变更时分别通知原执行人与新执行人，未变化时不发送"""
        if prev_assignee_id == next_assignee_id:
            return
        if prev_assignee_id:
            await self.notify_user(
                prev_assignee_id,
                messages.assignee_removed(task_title, space_name, actor_name),
            )
        if next_assignee_id:
            await self.notify_user(
                next_assignee_id,
                messages.assignee_added(task_title, space_name, actor_name),
            )
