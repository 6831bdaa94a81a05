"""
app.prompts.assistant
~~~~~~~~~~~~~~~~~~~~~

AI 编程助手与内容审核的 Prompt，以及模型不可用时的兜底回答。

将 Prompt 独立管理，调整话术时不需要修改 LLM 连接代码。
"""
from __future__ import annotations

# ---------------------------------------------------------------------------
# 编程助手
# ---------------------------------------------------------------------------
ASSISTANT_SYSTEM_PROMPT: str = (
    "You are an expert programming assistant. Provide clear, concise, and "
    "helpful explanations. Always use code examples when relevant."
)

_MODE_TEMPLATES: dict[str, str] = {
    "explain": (
        "Explain this code in detail:\n\n{question}\n\n"
        "Provide a clear explanation of what the code does, how it works, "
        "and any important concepts."
    ),
    "debug": (
        "Debug this code and explain the issues:\n\n{question}\n\n"
        "Identify bugs, suggest fixes, and explain why the original code doesn't work."
    ),
    "generate": (
        "Generate code for: {question}\n\n"
        "Provide clean, well-commented code that solves the problem."
    ),
    "learn": (
        "Explain this programming concept: {question}\n\n"
        "Provide a comprehensive explanation with examples."
    ),
}

_FALLBACK_TEMPLATES: dict[str, str] = {
    "explain": (
        "Let me explain: {question} - This code appears to be well-structured. "
        "Key components include..."
    ),
    "debug": (
        "Debugging: {question} - Check for common issues like syntax errors, "
        "variable scope, and async handling."
    ),
    "generate": (
        "Here's sample code:\n\nfunction solution() {{\n"
        "  // Implementation here\n  return result;\n}}"
    ),
    "learn": (
        "Concept explanation: {question} - This is fundamental to programming. "
        "Practice with small examples."
    ),
}

_DEFAULT_FALLBACK: str = (
    "I understand your question. In a full implementation, "
    "I would provide a detailed response."
)


def build_assistant_prompt(question: str, mode: str | None) -> str:
    """按提问模式组装发送给 LLM 的 Prompt。

    未知模式（或不传）时直接透传问题本身。
    """
    template = _MODE_TEMPLATES.get(mode or "")
    if template is None:
        return question
    return template.format(question=question)


def fallback_answer(question: str, mode: str | None) -> str:
    """模型调用失败时返回的静态回答。"""
    template = _FALLBACK_TEMPLATES.get(mode or "")
    if template is None:
        return _DEFAULT_FALLBACK
    return template.format(question=question)


# ---------------------------------------------------------------------------
# 内容审核
# ---------------------------------------------------------------------------
MODERATION_SYSTEM_PROMPT: str = """\
You are a content moderation classifier for a developer community chat.
Classify the user's message for toxicity: harassment, hate, threats,
sexual content, self-harm, or spam.
Respond ONLY with JSON of the form {"flagged": <bool>, "categories": [<string>, ...]}.
Code, technical jargon and mild frustration are NOT toxic.\
"""
