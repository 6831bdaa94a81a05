"""
app.schemas.chat
~~~~~~~~~~~~~~~~

实时聊天通道的入站事件载荷模型。
"""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

MessageType = Literal["text", "code", "file"]


class UserProfile(BaseModel):
    """``user_joined`` 事件携带的用户资料，至少包含 ``_id``。

    其余字段原样保留，作为在线列表的快照广播给其他连接。
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., alias="_id", min_length=1, description="用户 ID")
    fullName: str | None = Field(default=None, description="显示名称")
    avatar: str | None = Field(default=None, description="头像地址")
    isVerified: bool = Field(default=False, description="是否认证用户")


class CodeSnippet(BaseModel):
    """代码片段消息的载荷。"""

    language: str = Field(default="", description="代码语言")
    code: str = Field(..., description="代码内容")


class FileAttachment(BaseModel):
    """文件消息的载荷（文件本体先通过 /api/upload 上传）。"""

    name: str = Field(..., description="文件名")
    url: str = Field(..., description="文件相对地址")


class ChatMessageIn(BaseModel):
    """``chat_message`` 入站事件。"""

    model_config = ConfigDict(extra="ignore")

    userId: str = Field(..., min_length=1, description="作者用户 ID")
    text: str = Field(default="", description="消息文本")
    room: str | None = Field(default=None, description="目标房间，缺省为发送者当前房间")
    timestamp: datetime | None = Field(default=None, description="客户端发送时间")
    type: MessageType = Field(default="text", description="消息类型：text / code / file")
    codeSnippet: CodeSnippet | None = Field(default=None, description="代码片段")
    file: FileAttachment | None = Field(default=None, description="文件附件")
