"""
app.services.background
~~~~~~~~~~~~~~~~~~~~~~~

脱离调用方的后台任务（fire-and-forget）。

任务的异常不会抛回调用方，而是统一写入 ``app.background`` 日志。
任务对象在完成前由所属的 ``DetachedTasks`` 强引用持有，避免被垃圾回收提前销毁。
"""
from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

from app.core.logging import get_logger

logger = get_logger("app.background")


class DetachedTasks:
    """一组后台任务的持有者，由使用方（如 ``ModerationHook``）各自创建。"""

    def __init__(self) -> None:
        self._pending: set[asyncio.Task[Any]] = set()

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task[Any]:
        """在当前事件循环中启动一个脱离调用方的任务。

        Args:
            coro: 要执行的协程。
            name: 任务名，出现在失败日志中。

        Returns:
            已调度的 ``asyncio.Task``（调用方无需 await）。
        """
        task = asyncio.create_task(coro, name=name)
        self._pending.add(task)
        task.add_done_callback(self._on_done)
        return task

    @property
    def pending(self) -> frozenset[asyncio.Task[Any]]:
        """尚未完成的任务。"""
        return frozenset(self._pending)

    def cancel_all(self) -> int:
        """取消所有未完成的任务（应用关闭时调用），返回取消的数量。"""
        pending = list(self._pending)
        for task in pending:
            task.cancel()
        return len(pending)

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            logger.debug("后台任务已取消 | task=%s", task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(
                "后台任务失败 | task=%s | %s", task.get_name(), exc,
                exc_info=(type(exc), exc, exc.__traceback__),
            )
