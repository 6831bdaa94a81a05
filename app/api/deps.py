"""
app.api.deps
~~~~~~~~~~~~

FastAPI 依赖项 —— 从 ``app.state`` 取出 lifespan 中创建的服务对象，
以及管理员令牌校验。
"""
from __future__ import annotations

from typing import Any

from fastapi import Depends, Header, HTTPException, Request, status

from app.core.logging import get_logger
from app.core.security import JWTError, decode_token, extract_bearer_token
from app.db.repositories import Repositories
from app.services.assistant_service import AssistantService
from app.services.chat_relay import ChatRelay

logger = get_logger(__name__)


def get_repos(request: Request) -> Repositories:
    return request.app.state.repos


def get_chat_relay(request: Request) -> ChatRelay:
    return request.app.state.chat_relay


def get_assistant(request: Request) -> AssistantService:
    return request.app.state.assistant


async def get_current_admin(
    authorization: str | None = Header(default=None),
    repos: Repositories = Depends(get_repos),
) -> dict[str, Any]:
    """校验 ``Authorization: Bearer <token>`` 并要求用户为管理员。

    Raises:
        HTTPException: 401 缺少或无效令牌；403 非管理员。
    """
    token = extract_bearer_token(authorization)
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    try:
        claims = decode_token(token)
    except JWTError as e:
        logger.info("管理员令牌无效: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token",
        ) from e

    user = await repos.users.find_by_id(claims.get("userId"))
    if user is None or not user.get("isAdmin"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required",
        )
    return user
