"""
app.services.assistant_service
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

AI 编程助手业务层 —— 串联 Prompt 组装与 LLM 调用。

模型不可用时返回按模式区分的静态兜底回答，接口本身永远不因模型故障而报错。
"""
from __future__ import annotations

from app.core.logging import get_logger
from app.llm.gemini_assistant import GeminiAssistant
from app.prompts.assistant import build_assistant_prompt, fallback_answer

logger = get_logger(__name__)


class AssistantService:
    """编程助手服务（无状态，每次提问相互独立）。

    Attributes:
        bot: Gemini 客户端封装。
    """

    def __init__(self, bot: GeminiAssistant) -> None:
        self.bot = bot

    async def ask(self, question: str, mode: str | None = None) -> str:
        """按模式回答一个编程问题。

        Args:
            question: 问题描述或代码。
            mode: ``explain`` / ``debug`` / ``generate`` / ``learn``，其余按自由提问处理。
        """
        prompt: str = build_assistant_prompt(question, mode)
        logger.info("AI 助手提问 | mode=%s | len=%d", mode or "free", len(question))
        return await self.bot.generate_reply(prompt, fallback=fallback_answer(question, mode))
