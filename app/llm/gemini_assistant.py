"""
app.llm.gemini_assistant
~~~~~~~~~~~~~~~~~~~~~~~~

纯 LLM 客户端封装 —— 只负责与 Google Gemini API 的连接和调用。

每次提问都是一次独立的 ``generate_content`` 调用，不保留对话上下文。
通过构造函数接受 ``client`` 参数实现依赖注入，方便测试时替换为 mock。
"""
from __future__ import annotations

import asyncio

from google import genai
from google.genai import types

from app.core.config import settings
from app.core.logging import get_logger
from app.llm.client import create_gemini_client

logger = get_logger(__name__)


class GeminiAssistant:
    """Gemini 编程助手封装。

    Attributes:
        model_name: 使用的 Gemini 模型名称。
        system_prompt: 传递给模型的系统级指令。
        timeout: 单次调用的超时时间（秒）。
    """

    def __init__(
        self,
        system_prompt: str,
        model_name: str | None = None,
        client: genai.Client | None = None,
        timeout: float | None = None,
    ) -> None:
        self.model_name: str = model_name or settings.GEMINI_MODEL
        self.system_prompt: str = system_prompt
        self.timeout: float = timeout or settings.AI_TIMEOUT
        self._client: genai.Client = client or create_gemini_client()
        logger.info("LLM 客户端已初始化 | model=%s", self.model_name)

    async def generate_reply(self, prompt: str, fallback: str) -> str:
        """发送 Prompt 并获取完整回复。

        Args:
            prompt: 发送给模型的完整 Prompt（已由上层组装好）。
            fallback: 调用失败、超时或返回空文本时使用的兜底回答。

        Returns:
            模型回复文本，或 ``fallback``。
        """
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self.model_name,
                    contents=prompt,
                    config=types.GenerateContentConfig(
                        system_instruction=self.system_prompt,
                        max_output_tokens=settings.AI_MAX_TOKENS,
                    ),
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("LLM 调用超时（%.1fs），使用兜底回答", self.timeout)
            return fallback
        except Exception as e:
            logger.error("LLM 调用异常: %s", e, exc_info=True)
            return fallback

        if not response.text:
            logger.warning("LLM 返回空文本，使用兜底回答")
            return fallback
        return response.text
