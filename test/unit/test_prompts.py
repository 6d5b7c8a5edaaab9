from __future__ import annotations

import json

from domain.models import UserProfile
from domain.prompts import DSL_SYSTEM_PROMPT, build_dsl_prompt


def test_prompt_contains_instructions_html_and_user_data() -> None:
    profile = UserProfile.from_user_data({"email": "ada@example.com", "city": "London"})
    prompt = build_dsl_prompt(html="<form id='f'></form>", profile=profile)

    assert prompt.startswith(DSL_SYSTEM_PROMPT)
    assert "<form id='f'></form>" in prompt
    data = prompt.split("User data:\n", 1)[1].split("\n\n", 1)[0]
    assert json.loads(data) == {"city": "London", "email": "ada@example.com"}


def test_prompt_lists_every_dsl_command() -> None:
    for verb in ("click", "hover", "type", "upload", "wait"):
        assert f"  {verb} " in DSL_SYSTEM_PROMPT


def test_prompt_with_empty_profile() -> None:
    prompt = build_dsl_prompt(html="<form></form>", profile=UserProfile())
    assert "User data:\n{}\n" in prompt
