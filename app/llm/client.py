"""
app.llm.client
~~~~~~~~~~~~~~

Gemini API 客户端工厂 —— 全局共享的客户端创建入口。

AI 助手与内容审核统一从此处获取 Client，避免重复的创建逻辑分散在各模块中。
"""
from __future__ import annotations

from google import genai

from app.core.config import settings


def create_gemini_client() -> genai.Client:
    """创建 Gemini API 客户端实例。

    Returns:
        已认证的 ``genai.Client``。
    """
    return genai.Client(api_key=settings.GEMINI_API_KEY)
