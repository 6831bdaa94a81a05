"""
app.db.documents
~~~~~~~~~~~~~~~~

MongoDB 文档与 JSON 之间的转换工具。
"""
from __future__ import annotations

from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from fastapi.encoders import jsonable_encoder


def to_object_id(value: Any) -> ObjectId | None:
    """把字符串转换为 ``ObjectId``，非法输入返回 ``None``。"""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def as_reference(value: Any) -> Any:
    """用户引用字段：合法 ObjectId 字符串转为 ``ObjectId``，否则原样保存。"""
    oid = to_object_id(value)
    return oid if oid is not None else value


def serialize(doc: Any) -> Any:
    """把文档（或文档列表）转换为可直接 JSON 序列化的结构。

    ``ObjectId`` → 字符串，``datetime`` → ISO 字符串。
    """
    return jsonable_encoder(doc, custom_encoder={ObjectId: str})
