"""
app.schemas.users
~~~~~~~~~~~~~~~~~

注册 / 登录相关的 Pydantic 请求/响应模型。
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    """注册请求体。"""

    fullName: str = Field(..., min_length=1, description="显示名称")
    email: str = Field(..., min_length=3, description="邮箱（唯一）")
    role: str = Field(..., min_length=1, description="职业角色")
    level: str = Field(..., min_length=1, description="技术水平")
    skills: list[str] = Field(default_factory=list, description="技能标签")
    bio: str | None = Field(default=None, description="个人简介")
    country: str | None = Field(default=None, description="国家/地区")
    timezone: str | None = Field(default=None, description="时区")
    avatar: str | None = Field(default=None, description="头像地址")


class LoginRequest(BaseModel):
    """登录请求体（仅凭邮箱登录）。"""

    email: str = Field(..., min_length=3, description="注册邮箱")


class AuthData(BaseModel):
    """注册 / 登录成功的响应数据。"""

    token: str = Field(..., description="JWT 访问令牌")
    user: dict[str, Any] = Field(..., description="用户文档")
