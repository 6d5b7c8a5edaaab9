from __future__ import annotations

from domain.models import UserProfile

STRUCTURAL_KEYWORDS = (
    "<input",
    "<button",
    "<form",
    "<select",
    "type=",
    "id=",
    "name=",
    "class=",
)
FIELD_NAME_SEPARATOR = "|"

_FNV_OFFSET = 0xCBF29CE484222325
_FNV_PRIME = 0x100000001B3
_MASK_64 = 0xFFFFFFFFFFFFFFFF


def structural_digest_source(html: str) -> str:
    """Lines of ``html`` that describe form structure, in document order."""
    return "".join(
        line for line in html.splitlines() if any(kw in line for kw in STRUCTURAL_KEYWORDS)
    )


def _fnv1a_update(state: int, data: bytes) -> int:
    for byte in data:
        state ^= byte
        state = (state * _FNV_PRIME) & _MASK_64
    return state


def derive_cache_key(html: str, profile: UserProfile) -> str:
    """
    Deterministic cache key for a page and a user.

    Only the names of the profile fields enter the key, sorted so the key does
    not depend on the order the caller supplied them in. Values never do.
    """
    fields = FIELD_NAME_SEPARATOR.join(sorted(profile.field_names()))
    state = _fnv1a_update(_FNV_OFFSET, structural_digest_source(html).encode("utf-8"))
    state = _fnv1a_update(state, b"\x00")
    state = _fnv1a_update(state, fields.encode("utf-8"))
    return f"dsl_{state:016x}"
