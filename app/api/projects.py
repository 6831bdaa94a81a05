"""
app.api.projects
~~~~~~~~~~~~~~~~

项目展示接口。

端点:
  - ``GET  /projects`` → 最新 12 个公开项目（附作者展示字段）
  - ``POST /projects`` → 发布项目，首次发布的用户获得 "First Project" 徽章
"""
from typing import Any

from fastapi import APIRouter, Depends, Request

from app.api.deps import get_repos
from app.core.logging import get_logger
from app.core.rate_limit import limiter
from app.db.documents import serialize
from app.db.repositories import Repositories
from app.schemas.api_response import ApiResponse
from app.schemas.content import ProjectCreate
from app.services.catalog import FIRST_PROJECT_BADGE

logger = get_logger(__name__)

router: APIRouter = APIRouter(prefix="/projects")


@router.get("", summary="获取公开项目列表", response_model=ApiResponse[list[dict[str, Any]]])
@limiter.limit("20/second")
async def list_projects(request: Request, repos: Repositories = Depends(get_repos)):
    """返回最新的 12 个公开项目。"""
    projects = await repos.projects.list_public(limit=12)
    return ApiResponse.ok(data=serialize(projects))


@router.post("", summary="发布项目", response_model=ApiResponse[dict[str, Any]])
@limiter.limit("5/second")
async def create_project(
    request: Request,
    body: ProjectCreate,
    repos: Repositories = Depends(get_repos),
):
    """保存项目；如果所有者是第一次发布项目，颁发 "First Project" 徽章。"""
    project = await repos.projects.create(body.model_dump(exclude_none=True))

    if body.owner is not None:
        awarded = await repos.users.award_badge(body.owner, FIRST_PROJECT_BADGE)
        if awarded:
            logger.info("颁发徽章 | user=%s | badge=%s", body.owner, FIRST_PROJECT_BADGE["name"])

    return ApiResponse.ok(data=serialize(project))
