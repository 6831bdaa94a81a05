"""
app.api.realtime
~~~~~~~~~~~~~~~~

Socket.IO 实时聊天接口。

全局唯一的 ``sio`` 服务端通过 ``socketio.ASGIApp`` 与 FastAPI 挂在同一进程，
事件处理逻辑集中在 ``ChatNamespace``，状态全部委托给 ``ChatRelay``。

事件协议（入站）:
  - ``user_joined``  —— 用户资料（至少含 ``_id``），登记在线
  - ``join_room``    —— 房间标签字符串，切换房间
  - ``chat_message`` —— ``{userId, text, room, timestamp}``，落库并广播

事件协议（出站）:
  - ``user_joined`` / ``user_left`` / ``online_users`` / ``user_badges`` / ``chat_message``

``async_handlers=False``：同一连接的事件按到达顺序串行处理，
不同连接之间仍在 await 点交错执行。
"""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import socketio
from pydantic import ValidationError

from app.core.logging import get_logger, request_id_ctx_var
from app.schemas.chat import ChatMessageIn, UserProfile
from app.services.chat_relay import ChatRelay

logger = get_logger(__name__)

sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins="*",
    async_handlers=False,
    logger=False,
    engineio_logger=False,
)


@contextmanager
def _traced(sid: str) -> Iterator[None]:
    """事件处理期间，日志中的 request_id 为连接 ID。"""
    token = request_id_ctx_var.set(sid)
    try:
        yield
    finally:
        request_id_ctx_var.reset(token)


class ChatNamespace(socketio.AsyncNamespace):
    """默认命名空间 ``/`` 的聊天事件处理。

    实时通道本身不做鉴权。

    Attributes:
        relay: 聊天中继，持有在线状态与房间成员。
    """

    def __init__(self, namespace: str, relay: ChatRelay) -> None:
        super().__init__(namespace)
        self.relay = relay

    async def on_connect(self, sid: str, environ: dict[str, Any], auth: Any = None) -> None:
        with _traced(sid):
            self.relay.connect(sid)

    async def on_disconnect(self, sid: str, reason: Any = None) -> None:
        with _traced(sid):
            await self.relay.disconnect(sid)

    async def on_user_joined(self, sid: str, data: Any) -> None:
        with _traced(sid):
            try:
                profile = UserProfile.model_validate(data)
            except ValidationError as e:
                logger.warning("user_joined 载荷非法，已忽略: %s", e.errors())
                return
            # 广播原始资料快照，保留客户端附带的全部字段
            await self.relay.announce(sid, profile.model_dump(by_alias=True, exclude_none=True))

    async def on_join_room(self, sid: str, room: Any) -> None:
        with _traced(sid):
            if not isinstance(room, str):
                logger.warning("join_room 载荷不是字符串，已忽略: %r", room)
                return
            self.relay.join_room(sid, room)

    async def on_chat_message(self, sid: str, data: Any) -> None:
        with _traced(sid):
            try:
                message = ChatMessageIn.model_validate(data)
            except ValidationError as e:
                logger.warning("chat_message 载荷非法，已丢弃: %s", e.errors())
                return
            try:
                await self.relay.submit(sid, message)
            except Exception as e:
                # 任何异常都不能中断该连接的事件处理
                logger.error("消息转发异常: %s", e, exc_info=True)
