"""
app.db.lesson_repository
~~~~~~~~~~~~~~~~~~~~~~~~

课程与黑客松的只读仓库 —— 封装 ``lessons`` 和 ``hackathons`` 集合。
"""
from __future__ import annotations

from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING


class LessonRepository:
    """课程仓库，课程内容由运营直接写入数据库。"""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.db = db
        self._collection = db["lessons"]

    async def list_ordered(self, limit: int = 9) -> list[dict[str, Any]]:
        """按 ``order`` 升序返回前 ``limit`` 节课程。"""
        cursor = self._collection.find().sort("order", ASCENDING).limit(limit)
        return await cursor.to_list(length=limit)


class HackathonRepository:
    """黑客松仓库，目前只用于统计进行中的赛事数量。"""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.db = db
        self._collection = db["hackathons"]

    async def count_active(self) -> int:
        return await self._collection.count_documents({"isActive": True})
