"""
tests.test_assistant
~~~~~~~~~~~~~~~~~~~~

AI 编程助手单元测试：Prompt 组装、兜底回答与 Gemini 调用封装。
"""
from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.llm.gemini_assistant import GeminiAssistant
from app.prompts.assistant import build_assistant_prompt, fallback_answer
from app.services.assistant_service import AssistantService


# ── Prompt 组装测试 ────────────────────────────────────────────────────

class TestBuildAssistantPrompt:
    """测试按模式组装 Prompt。"""

    @pytest.mark.parametrize(
        ("mode", "marker"),
        [
            ("explain", "Explain this code in detail"),
            ("debug", "Debug this code"),
            ("generate", "Generate code for: "),
            ("learn", "Explain this programming concept"),
        ],
    )
    def test_known_modes_wrap_question(self, mode: str, marker: str) -> None:
        result = build_assistant_prompt("x = 1", mode)

        assert marker in result
        assert "x = 1" in result

    def test_unknown_mode_passes_question_through(self) -> None:
        assert build_assistant_prompt("what is a closure?", "chat") == "what is a closure?"
        assert build_assistant_prompt("what is a closure?", None) == "what is a closure?"


class TestFallbackAnswer:
    """测试模型不可用时的静态回答。"""

    def test_mode_specific_fallback(self) -> None:
        assert fallback_answer("recursion", "learn").startswith("Concept explanation: recursion")

    def test_generate_fallback_contains_code(self) -> None:
        assert "function solution() {" in fallback_answer("anything", "generate")

    def test_default_fallback(self) -> None:
        assert fallback_answer("hi", None).startswith("I understand your question.")


# ── GeminiAssistant 测试 ──────────────────────────────────────────────

def _client(text: str | None = None, error: Exception | None = None) -> MagicMock:
    client = MagicMock()
    if error is not None:
        client.aio.models.generate_content = AsyncMock(side_effect=error)
    else:
        response = MagicMock()
        response.text = text
        client.aio.models.generate_content = AsyncMock(return_value=response)
    return client


class TestGeminiAssistant:
    """测试 Gemini 调用封装的正常与兜底路径。"""

    @pytest.mark.asyncio
    async def test_returns_model_text(self) -> None:
        client = _client("A closure captures variables.")
        bot = GeminiAssistant(system_prompt="sys", model_name="fake-model", client=client)

        reply = await bot.generate_reply("what is a closure", fallback="fb")

        assert reply == "A closure captures variables."
        kwargs = client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "fake-model"
        assert kwargs["contents"] == "what is a closure"
        assert kwargs["config"].system_instruction == "sys"

    @pytest.mark.asyncio
    async def test_error_returns_fallback(self) -> None:
        bot = GeminiAssistant(system_prompt="sys", client=_client(error=RuntimeError("401")))

        assert await bot.generate_reply("q", fallback="fb") == "fb"

    @pytest.mark.asyncio
    async def test_empty_text_returns_fallback(self) -> None:
        bot = GeminiAssistant(system_prompt="sys", client=_client(text=None))

        assert await bot.generate_reply("q", fallback="fb") == "fb"

    @pytest.mark.asyncio
    async def test_timeout_returns_fallback(self) -> None:
        client = MagicMock()

        async def hang(**kwargs: object) -> None:
            await asyncio.sleep(10)

        client.aio.models.generate_content = hang
        bot = GeminiAssistant(system_prompt="sys", client=client, timeout=0.05)

        assert await bot.generate_reply("q", fallback="fb") == "fb"


class TestAssistantService:
    """测试业务层把模式与兜底回答传给 LLM。"""

    @pytest.mark.asyncio
    async def test_ask_builds_prompt_and_fallback(self) -> None:
        bot = MagicMock()
        bot.generate_reply = AsyncMock(return_value="answer")
        service = AssistantService(bot)

        answer = await service.ask("for i in range(3)", "debug")

        assert answer == "answer"
        prompt = bot.generate_reply.call_args.args[0]
        assert prompt.startswith("Debug this code")
        assert bot.generate_reply.call_args.kwargs["fallback"].startswith("Debugging: for i in range(3)")
