"""
app.api.stats
~~~~~~~~~~~~~

平台统计与管理后台接口。

端点:
  - ``GET /stats``           → 首页统计（在线人数取自实时聊天的在线状态表）
  - ``GET /admin/dashboard`` → 管理后台概览（需要管理员 Bearer 令牌）
"""
from typing import Any

from fastapi import APIRouter, Depends, Request

from app.api.deps import get_chat_relay, get_current_admin, get_repos
from app.core.rate_limit import limiter
from app.db.documents import serialize
from app.db.repositories import Repositories
from app.schemas.api_response import ApiResponse
from app.schemas.stats import DashboardData, StatsData
from app.services.catalog import FREE_APIS
from app.services.chat_relay import ChatRelay

router: APIRouter = APIRouter()


@router.get("/stats", summary="平台统计", response_model=ApiResponse[StatsData])
@limiter.limit("10/second")
async def stats(
    request: Request,
    repos: Repositories = Depends(get_repos),
    relay: ChatRelay = Depends(get_chat_relay),
):
    return ApiResponse.ok(
        data=StatsData(
            onlineUsers=relay.online_count,
            totalUsers=await repos.users.count(),
            totalProjects=await repos.projects.count(),
            availableAPIs=await repos.apis.count_approved() + len(FREE_APIS),
            activeChallenges=await repos.hackathons.count_active(),
        ),
    )


@router.get("/admin/dashboard", summary="管理后台概览", response_model=ApiResponse[DashboardData])
@limiter.limit("5/second")
async def admin_dashboard(
    request: Request,
    admin: dict[str, Any] = Depends(get_current_admin),
    repos: Repositories = Depends(get_repos),
):
    """返回管理后台所需的汇总数据。"""
    return ApiResponse.ok(
        data=DashboardData(
            totalUsers=await repos.users.count(),
            totalProjects=await repos.projects.count(),
            pendingApprovals=await repos.apis.count_pending(),
            totalMessages=await repos.messages.count(),
            recentUsers=serialize(await repos.users.recent(limit=5)),
            systemHealth="Operational",
        ),
    )
