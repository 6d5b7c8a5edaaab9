from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Union


def escape_for_dsl(value: str) -> str:
    """Escape a value for use inside a double-quoted DSL argument."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


_WELL_KNOWN_ALIASES = {
    "email": "email",
    "username": "username",
    "password": "password",
    "full_name": "full_name",
    "fullname": "full_name",
    "name": "full_name",
    "phone": "phone",
    "cv_path": "cv_path",
    "cv": "cv_path",
    "resume": "cv_path",
}


@dataclass(frozen=True)
class UserProfile:
    """User data available to fill a form.

    Well-known fields drive the built-in field mapping. Anything else the
    caller sends lands in ``extra`` and is matched against selectors by key.
    """

    email: str | None = None
    username: str | None = None
    password: str | None = None
    full_name: str | None = None
    phone: str | None = None
    cv_path: str | None = None
    extra: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze internal mapping to uphold dataclass immutability expectations.
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    @classmethod
    def from_user_data(cls, data: Any) -> "UserProfile":
        """Build a profile from an arbitrary JSON-like value.

        Never raises: a non-mapping yields an empty profile, non-string
        values are skipped for well-known fields and stringified for extras.
        Nested objects one level deep (``preferences``, ``form_data``) are
        flattened into the same namespace; top-level keys win over nested ones.
        """
        if not isinstance(data, Mapping):
            return cls()

        known: dict[str, str] = {}
        extra: dict[str, str] = {}
        nested = [value for value in data.values() if isinstance(value, Mapping)]
        for source in [data, *nested]:
            for raw_key, value in source.items():
                key = str(raw_key)
                target = _WELL_KNOWN_ALIASES.get(key.lower())
                if target is not None:
                    if isinstance(value, str) and value and target not in known:
                        known[target] = value
                    continue
                if key in extra or value is None or isinstance(value, (Mapping, list, tuple)):
                    continue
                text = ("true" if value else "false") if isinstance(value, bool) else str(value)
                if text:
                    extra[key] = text
        return cls(extra=extra, **known)

    def get(self, name: str) -> str | None:
        if name in _WELL_KNOWN_FIELDS:
            return getattr(self, name)
        return self.extra.get(name)

    def field_names(self) -> frozenset[str]:
        """Names of the fields that carry a value. Values are never exposed."""
        names = {n for n in _WELL_KNOWN_FIELDS if getattr(self, n)}
        names.update(k for k, v in self.extra.items() if v)
        return frozenset(names)


_WELL_KNOWN_FIELDS = ("email", "username", "password", "full_name", "phone", "cv_path")


# -- DSL commands -----------------------------------------------------------


@dataclass(frozen=True)
class Click:
    selector: str

    def render(self) -> str:
        return f'click "{escape_for_dsl(self.selector)}"'


@dataclass(frozen=True)
class Hover:
    selector: str

    def render(self) -> str:
        return f'hover "{escape_for_dsl(self.selector)}"'


@dataclass(frozen=True)
class Type:
    selector: str
    value: str

    def render(self) -> str:
        return f'type "{escape_for_dsl(self.selector)}" "{escape_for_dsl(self.value)}"'


@dataclass(frozen=True)
class Upload:
    selector: str
    path: str

    def render(self) -> str:
        return f'upload "{escape_for_dsl(self.selector)}" "{escape_for_dsl(self.path)}"'


@dataclass(frozen=True)
class Wait:
    seconds: float

    def render(self) -> str:
        seconds = float(self.seconds)
        if seconds.is_integer():
            return f"wait {int(seconds)}"
        return f"wait {seconds}"


DslCommand = Union[Click, Hover, Type, Upload, Wait]

DSL_VERBS = ("click", "type", "upload", "hover", "wait")


def render_script(commands: Iterable[DslCommand]) -> str:
    """Render commands into a newline-joined script."""
    return "\n".join(cmd.render() for cmd in commands)


# -- cache ------------------------------------------------------------------


@dataclass(frozen=True)
class CacheEntry:
    """A persisted script. ``expires_at`` governs validity, not deletion."""

    cache_key: str
    script: str
    source_html: str
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


# -- boundary records -------------------------------------------------------


@dataclass(frozen=True)
class DslRequest:
    """Request accepted at the synthesis boundary."""

    html: str
    user_data: Any = None

    @classmethod
    def from_payload(cls, payload: Any) -> "DslRequest":
        if not isinstance(payload, Mapping):
            return cls(html="")
        html = payload.get("html")
        return cls(
            html=html if isinstance(html, str) else "",
            user_data=payload.get("user_data"),
        )


@dataclass(frozen=True)
class DslResponse:
    script: str

    def to_payload(self) -> dict[str, str]:
        return {"script": self.script}


@dataclass(frozen=True)
class AppConfig:
    """Application-level configuration loaded from config.json."""

    llm_api_key: str | None = None
    llm_base_url: str = "https://api.openai.com/v1"
    llm_model: str = "gpt-4o"
    cache_db_path: str = "dsl_cache.db"
    cache_enabled: bool = True

    @property
    def llm_enabled(self) -> bool:
        return bool(self.llm_api_key)


__all__ = [
    "AppConfig",
    "UserProfile",
    "Click",
    "Hover",
    "Type",
    "Upload",
    "Wait",
    "DslCommand",
    "DSL_VERBS",
    "render_script",
    "escape_for_dsl",
    "CacheEntry",
    "DslRequest",
    "DslResponse",
]
