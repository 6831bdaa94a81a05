"""
app.db.api_repository
~~~~~~~~~~~~~~~~~~~~~

用户提交的 API 目录仓库 —— 封装 MongoDB ``apis`` 集合。

新提交的 API 默认未审核（``isApproved=False``），只有审核通过的才会出现在目录中。
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from app.db.documents import as_reference, to_object_id

_COLLECTION_NAME = "apis"


class ApiRepository:
    """API 目录仓库。"""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.db = db
        self._collection = db[_COLLECTION_NAME]

    async def list_approved(self) -> list[dict[str, Any]]:
        cursor = self._collection.find({"isApproved": True})
        return await cursor.to_list(length=None)

    async def create(self, data: dict[str, Any]) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "method": "GET",
            "isFree": True,
            "rateLimit": 100,
            **data,
            "isApproved": False,
            "usageCount": 0,
            "createdAt": datetime.now(timezone.utc),
        }
        if doc.get("submittedBy") is not None:
            doc["submittedBy"] = as_reference(doc["submittedBy"])
        result = await self._collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    async def increment_usage(self, api_id: Any) -> dict[str, Any] | None:
        """``usageCount`` 加一并返回更新后的文档，API 不存在时返回 ``None``。"""
        oid = to_object_id(api_id)
        if oid is None:
            return None
        return await self._collection.find_one_and_update(
            {"_id": oid},
            {"$inc": {"usageCount": 1}},
            return_document=ReturnDocument.AFTER,
        )

    async def count_approved(self) -> int:
        return await self._collection.count_documents({"isApproved": True})

    async def count_pending(self) -> int:
        return await self._collection.count_documents({"isApproved": False})
