"""Inventory of form-relevant elements found in captured page HTML.

The page is parsed once with BeautifulSoup; only ``<input>``, ``<button>``
and ``<select>`` elements and the text inside buttons are looked at.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Sequence

from bs4 import BeautifulSoup, Tag

_SUBMIT_WORDS = ("submit", "apply", "send")
_LOGIN_WORDS = ("login", "log in", "sign in")
_ACCEPT_WORDS = ("accept", "agree")

_SUBMIT_FALLBACKS = (
    '[type="submit"]',
    "#submit",
    "#apply",
    "#send",
    "#apply-submit",
    'button[type="submit"]',
)

_COOKIE_KEYWORDS = ("accept", "cookie", "consent", "agree", "ok", "got it")
_COOKIE_FALLBACKS = (
    ('id="accept-cookies"', "#accept-cookies"),
    ('class="cookie-consent', ".cookie-consent"),
)


def classify_button_role(text: str, default: str = "button") -> str:
    lower = text.lower()
    if any(word in lower for word in _SUBMIT_WORDS):
        return "submit"
    if any(word in lower for word in _LOGIN_WORDS):
        return "login"
    if any(word in lower for word in _ACCEPT_WORDS):
        return "accept"
    return default


def selector_in_html(selector: str, html: str) -> bool:
    """Check by plain substring whether ``selector`` plausibly exists in ``html``.

    ``#x`` is checked as ``id="x"`` and ``[attr="v"]`` (optionally prefixed
    by a tag name) as ``attr="v"``.
    """
    if selector in html:
        return True
    if selector.startswith("#"):
        ident = selector[1:]
        return f'id="{ident}"' in html or f"id='{ident}'" in html
    start = selector.find("[")
    if start != -1 and selector.endswith("]"):
        return selector[start + 1 : -1] in html
    return False


def _attr_text(element: Tag, key: str) -> str:
    value = element.get(key)
    if isinstance(value, list):
        value = " ".join(value)
    return (value or "").strip()


def _selectors_for(element: Tag, keys: Sequence[str]) -> list[str]:
    selectors: list[str] = []
    for key in keys:
        value = _attr_text(element, key)
        if not value:
            continue
        if key == "id":
            selectors.append(f"#{value}")
        elif key == "name":
            selectors.append(f'[name="{value}"]')
        elif key == "class":
            selectors.append(f".{value.split()[0]}")
    return selectors


def _classify(element: Tag) -> tuple[str, list[str]] | None:
    """Bucket name and selectors for one element, or None if it is not form-relevant."""
    if element.name == "input":
        kind = _attr_text(element, "type").lower() or "text"
        if kind in ("submit", "button"):
            role = classify_button_role(_attr_text(element, "value"), default=kind)
            return role, _selectors_for(element, ("id", "class"))
        return kind, _selectors_for(element, ("id", "name", "class"))
    if element.name == "button":
        default = "submit" if _attr_text(element, "type").lower() == "submit" else "button"
        role = classify_button_role(element.get_text(" ", strip=True), default=default)
        return role, _selectors_for(element, ("id", "class"))
    if element.name == "select":
        return "select", _selectors_for(element, ("id", "name"))
    return None


class FormAnalyzer:
    """Element inventory for one page. Immutable after construction."""

    def __init__(self, html: str) -> None:
        self._html = html or ""
        buckets: dict[str, list[str]] = {}
        # selector -> every selector of the element it was taken from
        groups: dict[str, tuple[str, ...]] = {}

        soup = BeautifulSoup(self._html, "html.parser")
        for element in soup.find_all(["input", "button", "select"]):
            classified = _classify(element)
            if classified is None or not classified[1]:
                continue
            kind, selectors = classified
            buckets.setdefault(kind, []).extend(selectors)
            for selector in selectors:
                groups.setdefault(selector, tuple(selectors))

        self._inventory: Mapping[str, tuple[str, ...]] = MappingProxyType(
            {kind: tuple(sels) for kind, sels in buckets.items()}
        )
        self._groups = MappingProxyType(groups)

    @property
    def html(self) -> str:
        return self._html

    @property
    def inventory(self) -> Mapping[str, tuple[str, ...]]:
        return self._inventory

    def get_elements_by_type(self, kind: str) -> tuple[str, ...]:
        return self._inventory.get(kind, ())

    def element_selectors(self, selector: str) -> tuple[str, ...]:
        """All candidate selectors of the element ``selector`` was built from."""
        return self._groups.get(selector, (selector,))

    def is_login_form(self) -> bool:
        has_user_field = bool(self.get_elements_by_type("text") or self.get_elements_by_type("email"))
        return bool(self.get_elements_by_type("password")) and has_user_field

    def find_submit_button(self) -> str | None:
        submits = self.get_elements_by_type("submit")
        if submits:
            return submits[0]
        for selector in _SUBMIT_FALLBACKS:
            if selector_in_html(selector, self._html):
                return selector
        return None

    def find_login_button(self) -> str | None:
        buttons = self.get_elements_by_type("login")
        return buttons[0] if buttons else None

    def find_cookie_consent(self) -> str | None:
        for keyword in _COOKIE_KEYWORDS:
            for kind, selectors in self._inventory.items():
                if keyword in kind and selectors:
                    return selectors[0]
        for marker, selector in _COOKIE_FALLBACKS:
            if marker in self._html:
                return selector
        return None
