"""
app.api.auth
~~~~~~~~~~~~

注册 / 登录接口。

端点:
  - ``POST /auth/register`` → 注册新用户并签发令牌（邮箱已存在返回 400）
  - ``POST /auth/login``    → 凭邮箱登录并签发令牌（用户不存在返回 400）
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from pymongo.errors import DuplicateKeyError

from app.core.logging import get_logger
from app.core.rate_limit import limiter
from app.core.security import create_access_token
from app.db.documents import serialize
from app.db.repositories import Repositories
from app.api.deps import get_repos
from app.schemas.api_response import ApiResponse
from app.schemas.users import AuthData, LoginRequest, RegisterRequest
from app.services.catalog import NEWCOMER_BADGE

logger = get_logger(__name__)

router: APIRouter = APIRouter(prefix="/auth")


@router.post("/register", summary="注册", response_model=ApiResponse[AuthData])
@limiter.limit("5/minute")
async def register(
    request: Request,
    body: RegisterRequest,
    repos: Repositories = Depends(get_repos),
):
    """注册新用户，赠送新手徽章并返回访问令牌。"""
    if await repos.users.find_by_email(body.email) is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")

    try:
        user = await repos.users.create(
            body.model_dump(exclude_none=True),
            badges=[NEWCOMER_BADGE],
        )
    except DuplicateKeyError as e:
        # 并发注册同一邮箱时，由 uniq_email 索引兜底
        logger.info("注册邮箱冲突 | email=%s", body.email)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists",
        ) from e
    logger.info("新用户注册 | user=%s", user["_id"])

    token = create_access_token(str(user["_id"]))
    return ApiResponse.ok(data=AuthData(token=token, user=serialize(user)))


@router.post("/login", summary="登录", response_model=ApiResponse[AuthData])
@limiter.limit("10/minute")
async def login(
    request: Request,
    body: LoginRequest,
    repos: Repositories = Depends(get_repos),
):
    """凭邮箱登录，刷新活跃时间并返回访问令牌。"""
    user = await repos.users.find_by_email(body.email)
    if user is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User not found")

    user = await repos.users.touch_last_active(user["_id"]) or user

    token = create_access_token(str(user["_id"]))
    return ApiResponse.ok(data=AuthData(token=token, user=serialize(user)))
