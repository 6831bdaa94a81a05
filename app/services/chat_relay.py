"""
app.services.chat_relay
~~~~~~~~~~~~~~~~~~~~~~~

实时聊天中继 —— 在线状态、房间成员与消息转发。

``ChatRelay`` 在 lifespan 中创建一次，挂载在 ``app.state.chat_relay``，
持有本进程唯一的 ``PresenceRegistry`` 和 ``RoomMembership``。
所有 Socket.IO 事件处理函数都只通过它读写这两份状态。

消息转发遵循"先落库、后广播"：
  1. 写入 ``messages`` 集合
  2. 重新读取并补全作者展示字段
  3. 按广播时刻的房间成员逐个推送
  4. 长消息旁路送审

落库失败只记日志，不广播，也不通知发送方。
"""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any

import socketio

from app.core.logging import get_logger
from app.db.documents import as_reference, serialize
from app.db.message_repository import ChatMessage, MessageRepository
from app.db.user_repository import UserRepository
from app.schemas.chat import ChatMessageIn
from app.services.moderation_hook import ModerationHook
from app.services.presence import PresenceRegistry
from app.services.room_membership import RoomMembership

logger = get_logger(__name__)


class ChatRelay:
    """实时聊天中继。

    Attributes:
        sio: Socket.IO 服务端，用于推送事件。
        users: 用户仓库（刷新活跃时间、读取徽章）。
        messages: 消息仓库。
        moderation: 可选的旁路审核钩子（为 None 时不审核）。
        presence: 在线状态登记表。
        rooms: 房间成员表。
        store_timeout: 单次数据库读写的超时时间（秒）。
    """

    def __init__(
        self,
        sio: socketio.AsyncServer,
        users: UserRepository,
        messages: MessageRepository,
        moderation: ModerationHook | None = None,
        default_room: str = "general",
        store_timeout: float = 5.0,
    ) -> None:
        self.sio = sio
        self.users = users
        self.messages = messages
        self.moderation = moderation
        self.store_timeout = store_timeout
        self.presence = PresenceRegistry()
        self.rooms = RoomMembership(default_room=default_room)

    @property
    def online_count(self) -> int:
        """当前在线人数。"""
        return self.presence.online_count

    # ── 连接生命周期 ──────────────────────────────────────────────────

    def connect(self, sid: str) -> None:
        """新连接加入默认房间。"""
        self.rooms.join_default(sid)
        logger.info("连接建立 | room=%s", self.rooms.default_room)

    async def announce(self, sid: str, profile: dict[str, Any]) -> None:
        """处理 ``user_joined``：登记在线状态并通知所有人。

        Args:
            sid: 连接 ID。
            profile: 用户资料快照，至少包含 ``_id``。
        """
        user_id = profile["_id"]
        self.presence.announce(sid, profile)

        await self._touch_last_active(user_id)

        await self.sio.emit("user_joined", profile, skip_sid=sid)
        await self.broadcast_online_users()

        badges = await self._load_badges(user_id)
        await self.sio.emit("user_badges", serialize(badges), to=sid)
        logger.info("用户上线 | user=%s | 在线: %d", user_id, self.online_count)

    def join_room(self, sid: str, room: str) -> None:
        """处理 ``join_room``：离开原房间并加入新房间。"""
        previous = self.rooms.join(sid, room)
        logger.info("切换房间 | %s -> %s", previous, room)

    async def disconnect(self, sid: str) -> None:
        """连接断开：清理房间与在线状态。

        只有此前宣告过在线的连接才会触发 ``user_left`` 和在线列表刷新。
        """
        self.rooms.leave(sid)
        profile = self.presence.remove(sid)
        if profile is None:
            logger.info("连接断开（未宣告在线）")
            return

        await self.sio.emit("user_left", profile, skip_sid=sid)
        await self.broadcast_online_users()
        logger.info("用户下线 | user=%s | 在线: %d", profile.get("_id"), self.online_count)

    # ── 消息转发 ──────────────────────────────────────────────────────

    async def submit(self, sid: str, message: ChatMessageIn) -> dict[str, Any] | None:
        """落库并向房间广播一条聊天消息。

        Args:
            sid: 发送方连接 ID（消息未指定房间时使用其当前房间）。
            message: 已校验的入站消息。

        Returns:
            已广播的消息载荷；落库失败时返回 ``None``。
        """
        room = message.room or self.rooms.room_of(sid) or self.rooms.default_room
        doc: ChatMessage = {
            "user": as_reference(message.userId),
            "text": message.text,
            "room": room,
            "type": message.type,
            "codeSnippet": message.codeSnippet.model_dump() if message.codeSnippet else None,
            "file": message.file.model_dump() if message.file else None,
            "timestamp": datetime.now(timezone.utc),
            "clientTimestamp": message.timestamp,
        }

        try:
            message_id = await asyncio.wait_for(
                self.messages.insert(doc), timeout=self.store_timeout,
            )
            enriched = await asyncio.wait_for(
                self.messages.get_enriched(message_id), timeout=self.store_timeout,
            )
        except asyncio.TimeoutError:
            logger.error("消息保存超时，已丢弃 | room=%s | user=%s", room, message.userId)
            return None
        except Exception as e:
            logger.error("消息保存失败: %s | room=%s", e, room, exc_info=True)
            return None

        if enriched is None:
            logger.error("消息已写入但无法读回 | id=%s", message_id)
            return None

        payload: dict[str, Any] = serialize({**enriched, "userId": message.userId})
        delivered = await self.broadcast_to_room(room, "chat_message", payload)
        logger.debug("消息已广播 | room=%s | 接收连接: %d", room, delivered)

        if self.moderation is not None:
            self.moderation.schedule(message.text, str(message_id))
        return payload

    # ── 广播 ──────────────────────────────────────────────────────────

    async def broadcast_to_room(self, room: str, event: str, data: Any) -> int:
        """向房间内（广播时刻的）所有连接推送事件，返回成功推送的连接数。"""
        members = self.rooms.members(room)
        results = await asyncio.gather(
            *(self.sio.emit(event, data, to=member) for member in members),
            return_exceptions=True,
        )
        delivered = 0
        for member, result in zip(members, results):
            if isinstance(result, Exception):
                logger.warning("推送失败 | sid=%s | %s", member, result)
            else:
                delivered += 1
        return delivered

    async def broadcast_online_users(self) -> None:
        """向所有连接推送完整在线列表。"""
        await self.sio.emit("online_users", self.presence.snapshot())

    # ── 协作方调用（尽力而为）────────────────────────────────────────

    async def _touch_last_active(self, user_id: Any) -> None:
        try:
            await asyncio.wait_for(
                self.users.touch_last_active(user_id), timeout=self.store_timeout,
            )
        except Exception as e:
            logger.warning("更新活跃时间失败 | user=%s | %s", user_id, e)

    async def _load_badges(self, user_id: Any) -> list[dict[str, Any]]:
        try:
            return await asyncio.wait_for(
                self.users.get_badges(user_id), timeout=self.store_timeout,
            )
        except Exception as e:
            logger.warning("读取徽章失败 | user=%s | %s", user_id, e)
            return []
