"""
app.db.message_repository
~~~~~~~~~~~~~~~~~~~~~~~~~

聊天消息持久化仓库 —— 封装 MongoDB ``messages`` 集合。

每条消息一个文档（扁平设计），写入后不可修改。
广播前通过 ``get_enriched()`` 重新读取，并把 ``user`` 引用替换为作者展示字段。
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, TypedDict

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.logging import get_logger
from app.db.user_repository import UserRepository
from app.schemas.chat import MessageType

logger = get_logger(__name__)

_COLLECTION_NAME = "messages"


class ChatMessage(TypedDict, total=False):
    """代表 MongoDB 中 messages 集合的单条记录。"""
    _id: ObjectId
    user: Any
    text: str
    room: str
    type: MessageType
    codeSnippet: dict[str, str] | None
    file: dict[str, str] | None
    timestamp: datetime
    clientTimestamp: datetime | None


class MessageRepository:
    """聊天消息持久化仓库。

    Attributes:
        db: MongoDB 数据库实例。
        users: 用于补全作者信息的用户仓库。
    """

    def __init__(self, db: AsyncIOMotorDatabase, users: UserRepository) -> None:
        self.db = db
        self.users = users
        self._collection = db[_COLLECTION_NAME]
        self._indexes_created = False

    async def _ensure_indexes(self) -> None:
        """确保索引已创建（惰性，首次操作时执行一次）。"""
        if self._indexes_created:
            return
        # 复合索引：按房间分区 + 按时间排序
        await self._collection.create_index(
            [("room", 1), ("timestamp", 1)],
            name="idx_room_time",
        )
        self._indexes_created = True
        logger.debug("messages 索引已就绪")

    async def insert(self, message: ChatMessage) -> ObjectId:
        """保存一条消息，返回其 ``_id``。"""
        await self._ensure_indexes()
        result = await self._collection.insert_one(dict(message))
        return result.inserted_id

    async def get_enriched(self, message_id: ObjectId) -> dict[str, Any] | None:
        """读取一条消息，并把 ``user`` 替换为作者展示字段。

        作者不存在时 ``user`` 为 ``None``。消息不存在时返回 ``None``。
        """
        doc = await self._collection.find_one({"_id": message_id})
        if doc is None:
            return None
        doc["user"] = await self.users.get_author(doc.get("user"))
        return doc

    async def count(self) -> int:
        return await self._collection.count_documents({})
