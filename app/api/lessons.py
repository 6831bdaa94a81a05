"""
app.api.lessons
~~~~~~~~~~~~~~~

课程接口：``GET /lessons`` 按顺序返回前 9 节课程。
"""
from typing import Any

from fastapi import APIRouter, Depends, Request

from app.api.deps import get_repos
from app.core.rate_limit import limiter
from app.db.documents import serialize
from app.db.repositories import Repositories
from app.schemas.api_response import ApiResponse

router: APIRouter = APIRouter(prefix="/lessons")


@router.get("", summary="获取课程列表", response_model=ApiResponse[list[dict[str, Any]]])
@limiter.limit("20/second")
async def list_lessons(request: Request, repos: Repositories = Depends(get_repos)):
    lessons = await repos.lessons.list_ordered(limit=9)
    return ApiResponse.ok(data=serialize(lessons))
