"""Prompt builders for the LLM-assisted synthesis strategy."""

from __future__ import annotations

import json

from domain.models import UserProfile

from .system_prompt import DSL_SYSTEM_PROMPT


def build_dsl_prompt(*, html: str, profile: UserProfile) -> str:
    """Build the single message sent to the model for one page."""

    user_data: dict[str, str] = {}
    for name in sorted(profile.field_names()):
        value = profile.get(name)
        if value:
            user_data[name] = value

    return (
        f"{DSL_SYSTEM_PROMPT}\n"
        f"Page HTML:\n"
        f"{html}\n"
        f"\n"
        f"User data:\n"
        f"{json.dumps(user_data, indent=2, sort_keys=True)}\n"
        f"\n"
        f"Write the DSL script for this form:"
    )
