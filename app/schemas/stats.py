"""
app.schemas.stats
~~~~~~~~~~~~~~~~~

平台统计与管理后台的响应模型。
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class StatsData(BaseModel):
    """首页统计数据。"""

    onlineUsers: int = Field(..., description="当前在线人数")
    totalUsers: int = Field(..., description="注册用户数")
    totalProjects: int = Field(..., description="项目数")
    availableAPIs: int = Field(..., description="可用 API 数（内置 + 已审核）")
    activeChallenges: int = Field(..., description="进行中的黑客松数")


class DashboardData(BaseModel):
    """管理后台概览数据。"""

    totalUsers: int
    totalProjects: int
    pendingApprovals: int = Field(..., description="待审核的 API 数")
    totalMessages: int
    recentUsers: list[dict[str, Any]] = Field(..., description="最近注册的 5 位用户")
    systemHealth: str = "Operational"
