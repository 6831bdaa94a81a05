"""
app.db.project_repository
~~~~~~~~~~~~~~~~~~~~~~~~~

项目展示持久化仓库 —— 封装 MongoDB ``projects`` 集合。
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING

from app.db.documents import as_reference
from app.db.user_repository import UserRepository

_COLLECTION_NAME = "projects"


class ProjectRepository:
    """项目展示仓库。

    Attributes:
        db: MongoDB 数据库实例。
        users: 用于补全 ``owner`` 展示字段的用户仓库。
    """

    def __init__(self, db: AsyncIOMotorDatabase, users: UserRepository) -> None:
        self.db = db
        self.users = users
        self._collection = db[_COLLECTION_NAME]

    async def list_public(self, limit: int = 12) -> list[dict[str, Any]]:
        """最新的公开项目（按创建时间倒序），``owner`` 替换为作者展示字段。"""
        cursor = (
            self._collection
            .find({"isPublic": True})
            .sort("createdAt", DESCENDING)
            .limit(limit)
        )
        projects = await cursor.to_list(length=limit)

        authors = await self.users.get_authors([p.get("owner") for p in projects])
        for project in projects:
            project["owner"] = authors.get(project.get("owner"))
        return projects

    async def create(self, data: dict[str, Any]) -> dict[str, Any]:
        """保存新项目并返回完整文档。"""
        now = datetime.now(timezone.utc)
        doc: dict[str, Any] = {
            "likes": 0,
            "isPublic": True,
            **data,
            "createdAt": now,
            "updatedAt": now,
        }
        if doc.get("owner") is not None:
            doc["owner"] = as_reference(doc["owner"])
        doc["collaborators"] = [as_reference(c) for c in doc.get("collaborators", [])]
        result = await self._collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    async def count(self) -> int:
        return await self._collection.count_documents({})
