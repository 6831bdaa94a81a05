"""
app.schemas.content
~~~~~~~~~~~~~~~~~~~

项目展示、API 目录与文件上传的 Pydantic 请求/响应模型。
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ProjectFile(BaseModel):
    name: str
    content: str = ""
    language: str | None = None


class ProjectCreate(BaseModel):
    """新建项目请求体。"""

    title: str = Field(..., min_length=1, description="项目标题")
    description: str = Field(..., min_length=1, description="项目描述")
    owner: str | None = Field(default=None, description="项目所有者用户 ID")
    githubUrl: str | None = Field(default=None, description="代码仓库地址")
    liveUrl: str | None = Field(default=None, description="在线演示地址")
    tags: list[str] = Field(default_factory=list, description="标签")
    image: str | None = Field(default=None, description="封面图")
    files: list[ProjectFile] = Field(default_factory=list, description="附带的源码文件")
    collaborators: list[str] = Field(default_factory=list, description="协作者用户 ID")
    isPublic: bool = Field(default=True, description="是否公开展示")


class ApiCreate(BaseModel):
    """提交 API 请求体。"""

    name: str = Field(..., min_length=1, description="API 名称")
    description: str = Field(..., min_length=1, description="API 描述")
    endpoint: str = Field(..., min_length=1, description="请求地址")
    method: str = Field(default="GET", description="HTTP 方法")
    headers: dict[str, Any] | None = Field(default=None, description="请求头示例")
    parameters: dict[str, Any] | None = Field(default=None, description="查询参数示例")
    body: dict[str, Any] | None = Field(default=None, description="请求体示例")
    category: str | None = Field(default=None, description="分类")
    isFree: bool = Field(default=True, description="是否免费")
    rateLimit: int = Field(default=100, ge=0, description="调用频率上限")
    submittedBy: str | None = Field(default=None, description="提交者用户 ID")


class ApiTestResult(BaseModel):
    """API 测试结果（演示数据）。"""

    message: str
    data: dict[str, Any]
    api: str


class UploadData(BaseModel):
    """文件上传响应数据。"""

    filename: str = Field(..., description="落盘文件名")
    url: str = Field(..., description="可访问的相对地址")
