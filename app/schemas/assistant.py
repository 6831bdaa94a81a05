"""
app.schemas.assistant
~~~~~~~~~~~~~~~~~~~~~

AI 编程助手的请求/响应模型。
"""
from __future__ import annotations

from pydantic import BaseModel, Field


class AskRequest(BaseModel):
    """提问请求体。

    ``mode`` 取 ``explain`` / ``debug`` / ``generate`` / ``learn``，
    其他值（或不传）按自由提问处理。
    """

    question: str = Field(..., min_length=1, max_length=8000, description="问题或代码")
    mode: str | None = Field(default=None, description="提问模式")


class AskResponseData(BaseModel):
    """助手回答。"""

    answer: str = Field(..., description="回答文本")
