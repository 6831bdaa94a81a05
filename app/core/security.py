"""
app.core.security
~~~~~~~~~~~~~~~~~

JWT 访问令牌的签发与校验（python-jose）。

令牌只携带 ``userId`` 声明，登录即签发，不涉及密码。
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from app.core.config import settings

__all__ = ["JWTError", "create_access_token", "decode_token", "extract_bearer_token"]


def create_access_token(user_id: str, expires_delta: timedelta | None = None) -> str:
    """为指定用户签发访问令牌。

    Args:
        user_id: 用户文档的 ``_id``（字符串形式）。
        expires_delta: 可选的有效期，默认读取 ``settings.JWT_EXPIRE_MINUTES``。
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.JWT_EXPIRE_MINUTES))
    claims: dict[str, Any] = {"userId": user_id, "iat": now, "exp": expire}
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """校验并解码令牌。

    Raises:
        JWTError: 签名错误、过期或格式非法。
    """
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


def extract_bearer_token(authorization: str | None) -> str | None:
    """从 ``Authorization: Bearer <token>`` 头中取出令牌。"""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
