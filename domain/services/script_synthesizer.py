from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Sequence

from domain.models import (
    DSL_VERBS,
    Click,
    DslCommand,
    Type,
    Upload,
    UserProfile,
    Wait,
    escape_for_dsl,
    render_script,
)
from domain.ports import LLMClientPort, LoggerPort
from domain.prompts import build_dsl_prompt
from domain.services.form_analyzer import FormAnalyzer, selector_in_html

BASIC_NAVIGATION_SCRIPT = "\n".join(
    [
        "// Basic navigation fallback - no form fields were recognized",
        "wait 2",
        "// click if present",
        'click "#accept-cookies"',
        "wait 1",
        "// click if present",
        'click "#login"',
        "wait 2",
    ]
)

EMERGENCY_FALLBACK_SCRIPT = "\n".join(
    [
        "// Emergency fallback - script generation failed, manual intervention may be required",
        "wait 5",
    ]
)

NAVIGATION_WAIT_SECONDS = 2

_COMPLEXITY_MARKERS = ('class="complex', "data-step=", "multi-step")
_SCRIPT_MARKERS = ("javascript:", "onclick=")
_VALIDATION_MARKERS = ("data-validation=", "pattern=")
# Attribute only: visible "Required" label text does not count.
_REQUIRED_ATTR = re.compile(r"<[^>]*\srequired(?:[\s>/=]|$)", re.IGNORECASE)
_MAX_SIMPLE_INPUTS = 5

_CHECKBOX_KEYWORDS = ("terms", "agree", "consent", "gdpr")

# Buckets that never receive typed text.
_NOT_TYPEABLE = frozenset(
    {"password", "file", "checkbox", "radio", "hidden", "submit", "login", "accept", "button", "select", "image", "reset"}
)


@dataclass(frozen=True)
class FieldRule:
    """Maps a profile field onto inputs by type and by selector name hints."""

    field: str
    input_types: tuple[str, ...]
    hints: tuple[str, ...]
    excluded: tuple[str, ...] = ()

    def matches(self, selector: str) -> bool:
        lower = _selector_identity(selector).lower()
        if any(word in lower for word in self.excluded):
            return False
        return any(hint in lower for hint in self.hints)


FIELD_RULES: tuple[FieldRule, ...] = (
    FieldRule(
        "full_name",
        ("text",),
        ("fullname", "full-name", "full_name", "name"),
        excluded=("user", "first", "last", "company", "login"),
    ),
    FieldRule("email", ("email", "text"), ("email", "mail")),
    FieldRule("phone", ("tel", "text", "number"), ("phone", "tel", "mobile")),
    FieldRule("username", ("text", "email"), ("username", "user", "login")),
)

SIMPLE_FIELD_SELECTORS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("username", ("#username", "#user", '[name="username"]', '[name="email"]')),
    ("password", ("#password", "#pass", '[name="password"]')),
    ("full_name", ("#fullname", "#full-name", "#name", '[name="fullname"]', '[name="name"]')),
    ("email", ("#email", '[name="email"]', '[type="email"]')),
    ("phone", ("#phone", "#telephone", '[name="phone"]', '[type="tel"]')),
    ("cv_path", ("#cv-upload", "#resume", "#cv", '[type="file"]')),
)

SIMPLE_LOGIN_BUTTON = "#login-btn"
_LOGIN_BUTTON_MARKERS = ('id="login-btn"', 'class="login')

SIMPLE_SUBMIT_SELECTORS = (
    "#submit",
    "#apply",
    "#send",
    "#login",
    "#apply-submit",
    '[type="submit"]',
    'button[type="submit"]',
)


@dataclass(frozen=True)
class SynthesisResult:
    script: str
    strategy: str


def is_complex_form(html: str) -> bool:
    """A page is complex when at least two complexity signals are present."""
    signals = (
        any(marker in html for marker in _COMPLEXITY_MARKERS),
        html.count("<input") > _MAX_SIMPLE_INPUTS,
        any(marker in html for marker in _SCRIPT_MARKERS),
        any(marker in html for marker in _VALIDATION_MARKERS) or bool(_REQUIRED_ATTR.search(html)),
    )
    return sum(signals) >= 2


def extract_dsl_lines(response: str) -> str:
    """Keep only the lines of a model reply that start with a DSL verb."""
    kept = []
    for raw in response.splitlines():
        line = raw.strip()
        verb = line.split(" ", 1)[0]
        if verb in DSL_VERBS:
            kept.append(line)
    return "\n".join(kept)


# -- enhanced analysis steps ------------------------------------------------


def generate_navigation_sequence(analyzer: FormAnalyzer) -> list[DslCommand]:
    commands: list[DslCommand] = [Wait(NAVIGATION_WAIT_SECONDS)]
    consent = analyzer.find_cookie_consent()
    if consent:
        commands.append(Click(consent))
    return commands


def generate_login_sequence(
    analyzer: FormAnalyzer,
    profile: UserProfile,
) -> list[DslCommand] | None:
    """Login commands, or ``None`` when the page or the profile cannot log in."""
    user_fields = analyzer.get_elements_by_type("email") or analyzer.get_elements_by_type("text")
    password_fields = analyzer.get_elements_by_type("password")
    if not user_fields or not password_fields:
        return None

    identity = profile.email or profile.username
    if not identity or not profile.password:
        return None

    commands: list[DslCommand] = [
        Type(user_fields[0], identity),
        Type(password_fields[0], profile.password),
    ]
    login_button = analyzer.find_login_button()
    if login_button:
        commands.append(Click(login_button))
    return commands


def generate_field_filling_sequence(
    analyzer: FormAnalyzer,
    profile: UserProfile,
    used: set[str] | None = None,
) -> list[DslCommand]:
    """
    Type well-known profile values, then ``extra`` values, into matching inputs.

    ``used`` holds selectors already targeted by earlier steps; it is updated
    in place so one element is filled at most once.
    """
    used = used if used is not None else set()
    commands: list[DslCommand] = []

    for rule in FIELD_RULES:
        value = profile.get(rule.field)
        if not value:
            continue
        selector = _first_free(
            (sel for kind in rule.input_types for sel in analyzer.get_elements_by_type(kind)),
            analyzer,
            used,
            rule.matches,
        )
        if selector:
            commands.append(Type(selector, value))

    typeable = [
        sel
        for kind, selectors in analyzer.inventory.items()
        if kind not in _NOT_TYPEABLE
        for sel in selectors
    ]
    for key in sorted(profile.extra):
        wanted = _normalize(key)
        selector = _first_free(
            typeable,
            analyzer,
            used,
            lambda sel: bool(wanted) and wanted in _normalize(_selector_identity(sel)),
        )
        if selector:
            commands.append(Type(selector, profile.extra[key]))
    return commands


def generate_upload_sequence(
    analyzer: FormAnalyzer,
    profile: UserProfile,
) -> list[DslCommand] | None:
    file_fields = analyzer.get_elements_by_type("file")
    if not profile.cv_path or not file_fields:
        return None
    return [Upload(file_fields[0], profile.cv_path)]


def generate_checkbox_sequence(
    analyzer: FormAnalyzer,
    used: set[str] | None = None,
) -> list[DslCommand]:
    used = used if used is not None else set()
    commands: list[DslCommand] = []
    for selector in analyzer.get_elements_by_type("checkbox"):
        if selector in used:
            continue
        if any(word in selector.lower() for word in _CHECKBOX_KEYWORDS):
            commands.append(Click(selector))
            used.update(analyzer.element_selectors(selector))
    return commands


def generate_enhanced_script(html: str, profile: UserProfile) -> str:
    """Structural strategy. Empty when the page offers nothing to act on."""
    analyzer = FormAnalyzer(html)
    used: set[str] = set()
    body: list[DslCommand] = []

    login = generate_login_sequence(analyzer, profile)
    if login:
        body.extend(login)
        for cmd in login:
            used.update(analyzer.element_selectors(cmd.selector))

    body.extend(generate_field_filling_sequence(analyzer, profile, used))

    upload = generate_upload_sequence(analyzer, profile)
    if upload:
        body.extend(upload)

    body.extend(generate_checkbox_sequence(analyzer, used))

    submit = analyzer.find_submit_button()
    if submit and submit not in used:
        body.append(Click(submit))

    if not body:
        return ""
    return render_script([*generate_navigation_sequence(analyzer), *body])


# -- simple heuristic -------------------------------------------------------


def generate_simple_script(html: str, profile: UserProfile) -> str:
    """Flat substring pass over the raw HTML with a fixed selector table."""
    lines: list[str] = []
    if any(marker in html for marker in _LOGIN_BUTTON_MARKERS):
        lines.append(f'click "{SIMPLE_LOGIN_BUTTON}"')

    for field, selectors in SIMPLE_FIELD_SELECTORS:
        value = profile.get(field)
        if not value:
            continue
        for selector in selectors:
            if selector_in_html(selector, html):
                verb = "upload" if field == "cv_path" else "type"
                lines.append(f'{verb} "{selector}" "{escape_for_dsl(value)}"')
                break

    for selector in SIMPLE_SUBMIT_SELECTORS:
        if selector_in_html(selector, html):
            lines.append(f'click "{selector}"')
            break
    return "\n".join(lines)


# -- chain ------------------------------------------------------------------


Strategy = Callable[[str, UserProfile], Awaitable[str]]


class ScriptSynthesizer:
    """
    Runs the generation strategies in priority order.

    The first strategy that returns a non-empty script wins. A strategy that
    raises is logged and treated as having produced nothing.
    """

    def __init__(
        self,
        *,
        logger: LoggerPort,
        llm: LLMClientPort | None = None,
        llm_max_tokens: int = 1000,
    ) -> None:
        self._logger = logger
        self._llm = llm
        self._llm_max_tokens = llm_max_tokens

    async def synthesize(self, html: str, profile: UserProfile) -> SynthesisResult:
        if not html or not html.strip():
            return SynthesisResult(BASIC_NAVIGATION_SCRIPT, "basic_navigation")

        for name, strategy in self._strategies(html):
            try:
                script = await strategy(html, profile)
            except Exception as exc:
                self._logger.warning(
                    "Synthesis strategy failed",
                    strategy=name,
                    error=f"{type(exc).__name__}: {exc}",
                )
                continue
            if script and script.strip():
                self._logger.info(
                    "Script synthesized",
                    strategy=name,
                    lines=len(script.splitlines()),
                )
                return SynthesisResult(script, name)

        self._logger.info("No strategy produced a script, using basic navigation")
        return SynthesisResult(BASIC_NAVIGATION_SCRIPT, "basic_navigation")

    def _strategies(self, html: str) -> Sequence[tuple[str, Strategy]]:
        strategies: list[tuple[str, Strategy]] = []
        llm = self._llm
        if llm is not None and is_complex_form(html):
            strategies.append(("llm", self._llm_strategy(llm)))
        strategies.append(("enhanced", _as_async(generate_enhanced_script)))
        strategies.append(("simple", _as_async(generate_simple_script)))
        return strategies

    def _llm_strategy(self, llm: LLMClientPort) -> Strategy:
        async def run(html: str, profile: UserProfile) -> str:
            reply = await llm.complete(
                build_dsl_prompt(html=html, profile=profile),
                max_tokens=self._llm_max_tokens,
                temperature=0.0,
            )
            return extract_dsl_lines(reply or "")

        return run


def _as_async(fn: Callable[[str, UserProfile], str]) -> Strategy:
    async def run(html: str, profile: UserProfile) -> str:
        return fn(html, profile)

    return run


def _first_free(
    candidates: Iterable[str],
    analyzer: FormAnalyzer,
    used: set[str],
    predicate: Callable[[str], bool],
) -> str | None:
    for selector in candidates:
        if selector in used or not predicate(selector):
            continue
        used.update(analyzer.element_selectors(selector))
        return selector
    return None


def _selector_identity(selector: str) -> str:
    if selector.startswith(("#", ".")):
        return selector[1:]
    if selector.startswith('[name="') and selector.endswith('"]'):
        return selector[len('[name="') : -2]
    return selector


def _normalize(text: str) -> str:
    return "".join(ch for ch in text.lower() if ch.isalnum())
