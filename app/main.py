"""
app.main
~~~~~~~~

FastAPI 应用入口 —— 注册路由、挂载中间件、定义生命周期，
并把 Socket.IO 服务端与 FastAPI 合并为同一个 ASGI 应用 ``asgi_app``。

启动方式::

    uvicorn app.main:asgi_app --port 5000
"""
from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

import socketio
from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import apis, assistant, auth, lessons, projects, stats, uploads
from app.api.realtime import ChatNamespace, sio
from app.core.config import settings
from app.core.logging import get_logger, request_id_ctx_var, setup_logging
from app.core.rate_limit import limiter
from app.db import close_mongo, connect_mongo, ping_mongo
from app.db.repositories import Repositories
from app.llm.gemini_assistant import GeminiAssistant
from app.llm.moderation import GeminiModerator
from app.prompts.assistant import ASSISTANT_SYSTEM_PROMPT
from app.schemas.api_response import ApiResponse
from app.services.assistant_service import AssistantService
from app.services.chat_relay import ChatRelay
from app.services.moderation_hook import ModerationHook

# 初始化日志系统（必须在其他模块之前）
setup_logging()
logger = get_logger(__name__)


# ── 生命周期 ──────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期钩子，仅在 worker 启动/关闭时各执行一次。"""
    # ── 启动 ──
    db = await connect_mongo()
    repos = Repositories(db)

    relay = ChatRelay(
        sio=sio,
        users=repos.users,
        messages=repos.messages,
        moderation=ModerationHook(
            moderator=GeminiModerator(),
            min_length=settings.MODERATION_MIN_LENGTH,
            timeout=settings.MODERATION_TIMEOUT,
        ),
        default_room=settings.DEFAULT_ROOM,
        store_timeout=settings.STORE_TIMEOUT,
    )
    sio.register_namespace(ChatNamespace("/", relay))

    app.state.repos = repos
    app.state.chat_relay = relay
    app.state.assistant = AssistantService(GeminiAssistant(system_prompt=ASSISTANT_SYSTEM_PROMPT))

    settings.upload_path.mkdir(parents=True, exist_ok=True)
    settings.static_path.mkdir(parents=True, exist_ok=True)

    logger.info(
        "🚀 %s 已启动 | port=%d | env=%s | log_level=%s",
        settings.PROJECT_NAME,
        settings.PORT,
        settings.ENVIRONMENT,
        settings.effective_log_level,
    )
    logger.info("访问地址: http://localhost:%d", settings.PORT)
    yield
    # ── 关闭 ──
    cancelled = relay.moderation.tasks.cancel_all() if relay.moderation else 0
    if cancelled:
        logger.info("已取消 %d 个进行中的审核任务", cancelled)
    await close_mongo()
    logger.info("👋 应用已关闭")


# ── 创建 FastAPI 实例 ─────────────────────────────────────────────────

app: FastAPI = FastAPI(
    title=settings.PROJECT_NAME,
    description="开发者社区平台后端：聊天、项目展示、API 目录、课程与 AI 助手",
    version=settings.VERSION,
    debug=settings.debug,
    lifespan=lifespan,
)
app.state.limiter = limiter

if settings.allow_cors_all_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
else:
    # prod 环境：仅允许指定来源
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def request_id_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """为每个 HTTP 请求分配追踪 ID，写入日志与响应头。"""
    request_id = f"req-{uuid.uuid4().hex[:8]}"
    token = request_id_ctx_var.set(request_id)
    try:
        response = await call_next(request)
    finally:
        request_id_ctx_var.reset(token)
    response.headers["X-Request-ID"] = request_id
    return response


# ── 路由挂载 ──────────────────────────────────────────────────────────
app.include_router(auth.router, prefix="/api", tags=["Auth"])
app.include_router(projects.router, prefix="/api", tags=["Projects"])
app.include_router(assistant.router, prefix="/api", tags=["AI Assistant"])
app.include_router(apis.router, prefix="/api", tags=["APIs Hub"])
app.include_router(lessons.router, prefix="/api", tags=["Lessons"])
app.include_router(stats.router, prefix="/api", tags=["Stats & Admin"])
app.include_router(uploads.router, prefix="/api", tags=["Upload"])

app.mount(
    "/uploads",
    StaticFiles(directory=settings.upload_path, check_dir=False),
    name="uploads",
)


# ── 全局异常处理器 ────────────────────────────────────────────────────

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """业务校验失败（4xx），返回统一的 ApiResponse.fail() 格式。"""
    response = ApiResponse.fail(msg=str(exc.detail), code=exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content=response.model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """请求体 / 参数校验失败（422）。"""
    response = ApiResponse.fail(msg="请求参数校验失败", code=422, data=jsonable_encoder(exc.errors()))
    return JSONResponse(status_code=422, content=response.model_dump())


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """触发限流（429）。"""
    response = ApiResponse.fail(msg=f"请求过于频繁: {exc.detail}", code=429)
    return JSONResponse(status_code=429, content=response.model_dump())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """捕获所有未处理异常，返回统一的 ApiResponse.fail() 格式。

    避免 FastAPI 默认返回 HTML 错误页面，保持 JSON 响应一致性。
    """
    logger.error("未捕获异常: %s %s -> %s", request.method, request.url, exc, exc_info=True)
    # 非 prod 环境返回详细错误信息，prod 环境隐藏内部细节
    detail = str(exc) if not settings.is_prod else "服务器内部错误"
    response = ApiResponse.fail(msg=detail, code=500, data=None)
    return JSONResponse(
        status_code=500,
        content=response.model_dump(),
    )


# ── 页面与健康检查 ────────────────────────────────────────────────────

@app.get("/admin", include_in_schema=False)
async def admin_page() -> RedirectResponse:
    """管理后台页面暂与主页面共用。"""
    return RedirectResponse(url="/")


@app.get("/health", tags=["System"])
async def health_check(request: Request) -> JSONResponse:
    """验证服务是否正常运行。"""
    relay: ChatRelay | None = getattr(request.app.state, "chat_relay", None)
    return JSONResponse(
        content={
            "status": "ok",
            "environment": settings.ENVIRONMENT,
            "debug": settings.debug,
            "log_level": settings.effective_log_level,
            "database": "up" if await ping_mongo() else "down",
            "online_users": relay.online_count if relay else 0,
        },
    )


# 前端静态资源（index.html、样式、脚本）。挂载在 "/"，必须最后注册，否则会遮住上面的路由
app.mount(
    "/",
    StaticFiles(directory=settings.static_path, html=True, check_dir=False),
    name="frontend",
)


# Socket.IO 与 FastAPI 共用一个 ASGI 入口，/socket.io 之外的请求交给 FastAPI
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:asgi_app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.reload,  # 仅 dev 环境开启热重载
        log_level=settings.effective_log_level.lower(),
    )
