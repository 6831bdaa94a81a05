"""
app.core.config
~~~~~~~~~~~~~~~

集中式配置管理，基于 pydantic-settings 自动从 ``.env`` 文件加载。

支持多环境配置（dev / test / prod），加载顺序为:
  1. 环境变量（最高优先级）
  2. ``.env.{ENVIRONMENT}`` 环境专属文件
  3. ``.env`` 基础文件
  4. 字段默认值（最低优先级）
"""
from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# 读取当前环境标识（在 Settings 类定义之前，用于决定加载哪个 .env 文件）
_CURRENT_ENV: str = os.getenv("ENVIRONMENT", "dev")

# 项目根目录（app/ 的上一级）
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """全局配置对象，字段值按如下优先级加载：环境变量 > .env.{env} > .env > 默认值。"""

    # ── 基础 ──────────────────────────────────────────────────────────
    PROJECT_NAME: str = Field(default="Devs Arena", description="项目名称")
    VERSION: str = Field(default="0.1.0", description="版本号")
    ENVIRONMENT: Literal["dev", "test", "prod"] = Field(
        default="dev",
        description="运行环境：dev / test / prod",
    )

    # ── API Keys ──────────────────────────────────────────────────────
    GEMINI_API_KEY: str = Field(..., description="Google Gemini API Key")

    # ── LLM ───────────────────────────────────────────────────────────
    GEMINI_MODEL: str = Field(
        default="gemini-2.5-flash",
        description="AI 助手与内容审核使用的 Gemini 模型名称",
    )
    AI_MAX_TOKENS: int = Field(default=1000, description="AI 助手单次回复的最大 token 数")

    # ── MongoDB ───────────────────────────────────────────────────────
    MONGO_URI: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB 连接串",
    )
    MONGO_DB_NAME: str = Field(default="devsarena", description="MongoDB 数据库名")
    MONGO_TIMEOUT_MS: int = Field(
        default=5000,
        description="MongoDB 服务器选择超时（毫秒）",
    )

    # ── 认证 ──────────────────────────────────────────────────────────
    JWT_SECRET: str = Field(default="fallback_secret", description="JWT 签名密钥")
    JWT_ALGORITHM: str = Field(default="HS256", description="JWT 签名算法")
    JWT_EXPIRE_MINUTES: int = Field(
        default=60 * 24 * 7,
        description="访问令牌有效期（分钟）",
    )

    # ── 实时聊天 ──────────────────────────────────────────────────────
    DEFAULT_ROOM: str = Field(default="general", description="新连接默认加入的房间")
    MODERATION_MIN_LENGTH: int = Field(
        default=10,
        description="超过该长度的消息才会送审",
    )

    # ── 外部调用超时（秒）────────────────────────────────────────────
    STORE_TIMEOUT: float = Field(default=5.0, description="实时链路中单次数据库读写超时")
    MODERATION_TIMEOUT: float = Field(default=10.0, description="内容审核调用超时")
    AI_TIMEOUT: float = Field(default=30.0, description="AI 助手调用超时")

    # ── 文件 ──────────────────────────────────────────────────────────
    UPLOAD_DIR: str = Field(default="uploads", description="上传文件目录（相对项目根目录）")
    STATIC_DIR: str = Field(default="public", description="前端静态资源目录（相对项目根目录），挂载在 /")

    # ── 服务 ──────────────────────────────────────────────────────────
    HOST: str = Field(default="0.0.0.0", description="服务监听地址")
    PORT: int = Field(default=5000, description="服务监听端口")
    LOG_LEVEL: str = Field(default="INFO", description="日志级别（可被环境属性覆盖）")

    # ── Pydantic Settings ─────────────────────────────────────────────
    # 先加载 .env.{env} 再加载 .env，前者优先级更高
    model_config = SettingsConfigDict(
        env_file=(f".env.{_CURRENT_ENV}", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── 环境判断 ──────────────────────────────────────────────────────

    @property
    def is_prod(self) -> bool:
        """当前是否为生产环境。"""
        return self.ENVIRONMENT == "prod"

    @property
    def is_test(self) -> bool:
        """当前是否为测试环境。"""
        return self.ENVIRONMENT == "test"

    @property
    def is_dev(self) -> bool:
        """当前是否为开发环境。"""
        return self.ENVIRONMENT == "dev"

    # ── 环境差异化行为 ────────────────────────────────────────────────

    @property
    def debug(self) -> bool:
        """是否开启 debug 模式。仅 dev 环境开启。"""
        return self.is_dev

    @property
    def reload(self) -> bool:
        """是否开启热重载。仅 dev 环境开启。"""
        return self.is_dev

    @property
    def effective_log_level(self) -> str:
        """根据环境自动推断日志级别。

        - dev  → INFO
        - test → DEBUG（方便排查测试失败）
        - prod → WARNING（减少噪音）

        如果环境变量中显式设置了 LOG_LEVEL，会覆盖此默认推断。
        """
        env_log = os.getenv("LOG_LEVEL")
        if env_log:
            return env_log
        return {
            "dev": "INFO",
            "test": "DEBUG",
            "prod": "WARNING",
        }.get(self.ENVIRONMENT, "INFO")

    @property
    def allow_cors_all_origins(self) -> bool:
        """是否允许所有 CORS 来源。非 prod 环境允许，方便本地调试。"""
        return not self.is_prod

    @property
    def upload_path(self) -> Path:
        """上传目录的绝对路径。"""
        return PROJECT_ROOT / self.UPLOAD_DIR

    @property
    def static_path(self) -> Path:
        """静态页面目录的绝对路径。"""
        return PROJECT_ROOT / self.STATIC_DIR


@lru_cache
def get_settings() -> Settings:
    """获取全局 Settings 单例（带缓存，避免重复解析 .env）。"""
    return Settings()


settings: Settings = get_settings()
