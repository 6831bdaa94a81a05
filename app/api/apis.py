"""
app.api.apis
~~~~~~~~~~~~

API 目录接口。

端点:
  - ``GET  /apis``           → 内置免费 API + 已审核的用户提交 API
  - ``POST /apis``           → 提交新 API（待审核）
  - ``GET  /apis/{id}/test`` → 测试 API（累加调用次数，返回演示数据）
"""
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.api.deps import get_repos
from app.core.rate_limit import limiter
from app.db.documents import serialize
from app.db.repositories import Repositories
from app.schemas.api_response import ApiResponse
from app.schemas.content import ApiCreate, ApiTestResult
from app.services.catalog import FREE_APIS

router: APIRouter = APIRouter(prefix="/apis")


@router.get("", summary="获取 API 目录", response_model=ApiResponse[list[dict[str, Any]]])
@limiter.limit("20/second")
async def list_apis(request: Request, repos: Repositories = Depends(get_repos)):
    user_apis = await repos.apis.list_approved()
    return ApiResponse.ok(data=[*FREE_APIS, *serialize(user_apis)])


@router.post("", summary="提交 API", response_model=ApiResponse[dict[str, Any]])
@limiter.limit("5/second")
async def submit_api(
    request: Request,
    body: ApiCreate,
    repos: Repositories = Depends(get_repos),
):
    """提交一个新的 API，审核通过前不会出现在目录中。"""
    api = await repos.apis.create(body.model_dump(exclude_none=True))
    return ApiResponse.ok(data=serialize(api))


@router.get("/{api_id}/test", summary="测试 API", response_model=ApiResponse[ApiTestResult])
@limiter.limit("5/second")
async def try_api(
    request: Request,
    api_id: str,
    repos: Repositories = Depends(get_repos),
):
    """记录一次调用并返回演示数据（不会真正请求目标地址）。"""
    api = await repos.apis.increment_usage(api_id)
    if api is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="API not found")

    return ApiResponse.ok(
        data=ApiTestResult(
            message="API test successful",
            data={"id": 1, "name": "Test Item", "value": "Test Data"},
            api=api["name"],
        ),
    )
