"""Prompt templates for the LLM-assisted synthesis strategy."""

from .system_prompt import DSL_SYSTEM_PROMPT  # noqa: F401
from .task_prompts import build_dsl_prompt  # noqa: F401

__all__ = [
    "DSL_SYSTEM_PROMPT",
    "build_dsl_prompt",
]
