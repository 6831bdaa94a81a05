"""
app.db.user_repository
~~~~~~~~~~~~~~~~~~~~~~

用户持久化仓库 —— 封装 MongoDB ``users`` 集合。

徽章以内嵌数组的形式保存在用户文档中（``badges``），
聊天消息与项目展示只读取作者的展示字段（``AUTHOR_PROJECTION``）。
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument

from app.core.logging import get_logger
from app.db.documents import to_object_id

logger = get_logger(__name__)

_COLLECTION_NAME = "users"

# 聊天 / 项目展示时附带的作者字段
AUTHOR_PROJECTION: dict[str, int] = {"fullName": 1, "avatar": 1, "isVerified": 1}


class UserRepository:
    """用户持久化仓库。

    Attributes:
        db: MongoDB 数据库实例。
    """

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.db = db
        self._collection = db[_COLLECTION_NAME]
        self._indexes_created = False

    async def _ensure_indexes(self) -> None:
        """确保 email 唯一索引已创建（惰性，首次操作时执行一次）。"""
        if self._indexes_created:
            return
        await self._collection.create_index("email", unique=True, name="uniq_email")
        self._indexes_created = True
        logger.debug("users 索引已就绪")

    async def find_by_email(self, email: str) -> dict[str, Any] | None:
        await self._ensure_indexes()
        return await self._collection.find_one({"email": email})

    async def find_by_id(self, user_id: Any) -> dict[str, Any] | None:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        return await self._collection.find_one({"_id": oid})

    async def create(
        self,
        profile: dict[str, Any],
        badges: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        """创建新用户，补齐默认字段后返回完整文档。

        Args:
            profile: 注册信息（fullName、email、role、level 等）。
            badges: 初始徽章列表（通常是新手徽章）。
        """
        await self._ensure_indexes()
        now = datetime.now(timezone.utc)
        doc: dict[str, Any] = {
            "country": "Global",
            "skills": [],
            "reputation": 0,
            "isVerified": False,
            "isAdmin": False,
            **profile,
            "badges": [{**badge, "earnedAt": now} for badge in badges or []],
            "joinedAt": now,
            "lastActive": now,
        }
        result = await self._collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    async def touch_last_active(self, user_id: Any) -> dict[str, Any] | None:
        """刷新用户的 ``lastActive``，返回更新后的文档（用户不存在时为 None）。"""
        oid = to_object_id(user_id)
        if oid is None:
            return None
        return await self._collection.find_one_and_update(
            {"_id": oid},
            {"$set": {"lastActive": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER,
        )

    async def get_badges(self, user_id: Any) -> list[dict[str, Any]]:
        """获取用户已获得的徽章，用户不存在时返回空列表。"""
        oid = to_object_id(user_id)
        if oid is None:
            return []
        doc = await self._collection.find_one({"_id": oid}, {"badges": 1})
        if doc is None:
            return []
        return doc.get("badges", [])

    async def award_badge(self, user_id: Any, badge: dict[str, Any]) -> bool:
        """为用户颁发徽章（同名徽章只颁发一次）。

        Returns:
            本次是否新增了徽章。
        """
        oid = to_object_id(user_id)
        if oid is None:
            return False
        result = await self._collection.update_one(
            {"_id": oid, "badges.name": {"$ne": badge["name"]}},
            {"$push": {"badges": {**badge, "earnedAt": datetime.now(timezone.utc)}}},
        )
        return result.modified_count == 1

    async def get_author(self, user_id: Any) -> dict[str, Any] | None:
        """读取作者展示字段（fullName / avatar / isVerified）。"""
        oid = to_object_id(user_id)
        if oid is None:
            return None
        return await self._collection.find_one({"_id": oid}, AUTHOR_PROJECTION)

    async def get_authors(self, user_ids: list[Any]) -> dict[Any, dict[str, Any]]:
        """批量读取作者展示字段，返回 ``{_id: 作者}``。"""
        oids = [oid for oid in (to_object_id(uid) for uid in user_ids) if oid is not None]
        if not oids:
            return {}
        cursor = self._collection.find({"_id": {"$in": oids}}, AUTHOR_PROJECTION)
        authors = await cursor.to_list(length=len(oids))
        return {author["_id"]: author for author in authors}

    async def recent(self, limit: int = 5) -> list[dict[str, Any]]:
        """最近注册的用户（按注册时间倒序）。"""
        cursor = self._collection.find().sort("joinedAt", DESCENDING).limit(limit)
        return await cursor.to_list(length=limit)

    async def count(self) -> int:
        return await self._collection.count_documents({})
