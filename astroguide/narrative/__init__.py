"""Chat payload builders and deterministic chart answers."""

from .factual import answer_factual_question, is_factual_question
from .prompts import build_chat_messages, build_system_prompt, format_birth_chart

__all__ = [
    "answer_factual_question",
    "build_chat_messages",
    "build_system_prompt",
    "format_birth_chart",
    "is_factual_question",
]
