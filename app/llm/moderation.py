"""
app.llm.moderation
~~~~~~~~~~~~~~~~~~

基于 Gemini 的内容审核客户端 —— 对一段文本做毒性分类。

模型被要求以 JSON 返回 ``{"flagged": bool, "categories": [...]}``，
解析失败视为调用失败，由调用方决定如何处理。
"""
from __future__ import annotations

from google import genai
from google.genai import types
from pydantic import BaseModel, Field

from app.core.config import settings
from app.llm.client import create_gemini_client
from app.prompts.assistant import MODERATION_SYSTEM_PROMPT


class ModerationResult(BaseModel):
    """一次审核的结果。"""

    flagged: bool = Field(..., description="是否判定为不当内容")
    categories: list[str] = Field(default_factory=list, description="命中的类别")


class GeminiModerator:
    """调用 Gemini 对文本做毒性分类。"""

    def __init__(
        self,
        model_name: str | None = None,
        client: genai.Client | None = None,
    ) -> None:
        self.model_name: str = model_name or settings.GEMINI_MODEL
        self._client: genai.Client = client or create_gemini_client()

    async def classify(self, text: str) -> ModerationResult:
        """审核一段文本。

        Raises:
            pydantic.ValidationError: 模型返回的不是预期的 JSON。
            Exception: Gemini 调用本身的异常原样抛出。
        """
        response = await self._client.aio.models.generate_content(
            model=self.model_name,
            contents=text,
            config=types.GenerateContentConfig(
                system_instruction=MODERATION_SYSTEM_PROMPT,
                response_mime_type="application/json",
                temperature=0.0,
            ),
        )
        return ModerationResult.model_validate_json(response.text or "")
