"""
app.services.moderation_hook
~~~~~~~~~~~~~~~~~~~~~~~~~~~~

聊天消息的旁路内容审核。

消息广播之后才送审，结果只写日志：不撤回消息、不警告用户、不限流。
审核调用的任何失败都不会影响聊天链路。
"""
from __future__ import annotations

import asyncio

from app.core.logging import get_logger
from app.llm.moderation import GeminiModerator, ModerationResult
from app.services.background import DetachedTasks

logger = get_logger(__name__)


class ModerationHook:
    """长消息的异步毒性检测。

    Attributes:
        moderator: 实际执行分类的审核客户端。
        min_length: 文本长度超过该值才送审。
        timeout: 单次审核调用的超时时间（秒）。
        tasks: 进行中的审核任务。
    """

    def __init__(
        self,
        moderator: GeminiModerator,
        min_length: int = 10,
        timeout: float = 10.0,
    ) -> None:
        self.moderator = moderator
        self.min_length = min_length
        self.timeout = timeout
        self.tasks = DetachedTasks()

    def should_review(self, text: str) -> bool:
        return len(text) > self.min_length

    def schedule(self, text: str, message_id: str) -> asyncio.Task | None:
        """满足长度条件时启动后台审核任务，调用方无需等待。"""
        if not self.should_review(text):
            return None
        return self.tasks.spawn(self.review(text, message_id), name=f"moderation-{message_id}")

    async def review(self, text: str, message_id: str) -> ModerationResult | None:
        """执行一次审核并记录结果；失败或超时返回 ``None``。"""
        try:
            result = await asyncio.wait_for(self.moderator.classify(text), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("内容审核超时，已跳过 | message=%s", message_id)
            return None
        except Exception as e:
            logger.warning("内容审核调用失败，已跳过 | message=%s | %s", message_id, e)
            return None

        if result.flagged:
            logger.warning(
                "检测到不当内容 | message=%s | categories=%s | text=%r",
                message_id, ",".join(result.categories) or "-", text,
            )
        else:
            logger.debug("内容审核通过 | message=%s", message_id)
        return result
