"""
tests.conftest
~~~~~~~~~~~~~~

共享 pytest fixtures —— 用内存假对象替换 MongoDB、Socket.IO 和 Gemini，
使单元测试可在无网络、无数据库的环境下快速运行。
"""
from __future__ import annotations

import os
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId

# ── 在所有测试导入前设置环境变量 ─────────────────────────────────────
os.environ.setdefault("GEMINI_API_KEY", "test-fake-key")
os.environ.setdefault("ENVIRONMENT", "test")  # 激活 .env.test 配置，并关闭 HTTP 限流

from app.services.chat_relay import ChatRelay  # noqa: E402


# ── Socket.IO 假服务端 ────────────────────────────────────────────────

class FakeSocketServer:
    """记录所有 ``emit`` 调用的假 Socket.IO 服务端。"""

    def __init__(self) -> None:
        self.emitted: list[dict[str, Any]] = []

    async def emit(
        self,
        event: str,
        data: Any = None,
        to: str | None = None,
        skip_sid: str | None = None,
    ) -> None:
        self.emitted.append({"event": event, "data": data, "to": to, "skip_sid": skip_sid})

    def received(self, sid: str, event: str | None = None) -> list[Any]:
        """某个连接实际会收到的事件载荷（按 emit 顺序）。"""
        payloads: list[Any] = []
        for call in self.emitted:
            if event is not None and call["event"] != event:
                continue
            if call["to"] is not None:
                if call["to"] == sid:
                    payloads.append(call["data"])
            elif call["skip_sid"] != sid:
                payloads.append(call["data"])
        return payloads

    def events(self, event: str) -> list[dict[str, Any]]:
        return [call for call in self.emitted if call["event"] == event]


# ── 消息仓库假对象 ────────────────────────────────────────────────────

class FakeMessageRepository:
    """内存版 ``MessageRepository``，``authors`` 为 ``{ObjectId: 作者展示字段}``。"""

    def __init__(self, authors: dict[ObjectId, dict[str, Any]] | None = None) -> None:
        self.authors = authors or {}
        self.docs: dict[ObjectId, dict[str, Any]] = {}

    async def insert(self, message: dict[str, Any]) -> ObjectId:
        oid = ObjectId()
        self.docs[oid] = {"_id": oid, **message}
        return oid

    async def get_enriched(self, message_id: ObjectId) -> dict[str, Any] | None:
        doc = self.docs.get(message_id)
        if doc is None:
            return None
        return {**doc, "user": self.authors.get(doc["user"])}

    async def count(self) -> int:
        return len(self.docs)


@pytest.fixture()
def author_id() -> ObjectId:
    return ObjectId()


@pytest.fixture()
def fake_sio() -> FakeSocketServer:
    return FakeSocketServer()


@pytest.fixture()
def fake_messages(author_id: ObjectId) -> FakeMessageRepository:
    return FakeMessageRepository(
        authors={
            author_id: {
                "_id": author_id,
                "fullName": "Ada Lovelace",
                "avatar": "/uploads/ada.png",
                "isVerified": True,
            },
        },
    )


@pytest.fixture()
def fake_users() -> MagicMock:
    """``UserRepository`` 的 mock，所有方法都是 AsyncMock。"""
    users = MagicMock()
    users.touch_last_active = AsyncMock(return_value={"_id": ObjectId()})
    users.get_badges = AsyncMock(
        return_value=[{"name": "Newcomer", "icon": "fa-seedling", "color": "green"}],
    )
    return users


@pytest.fixture()
def relay(
    fake_sio: FakeSocketServer,
    fake_users: MagicMock,
    fake_messages: FakeMessageRepository,
) -> ChatRelay:
    return ChatRelay(
        sio=fake_sio,  # type: ignore[arg-type]
        users=fake_users,
        messages=fake_messages,  # type: ignore[arg-type]
        moderation=None,
        default_room="general",
        store_timeout=1.0,
    )
