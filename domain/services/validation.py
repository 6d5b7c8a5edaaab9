"""Script checks.

``validate_script`` is the cache-admission gate used by the orchestrator.
``check_dsl_syntax`` is the stricter grammar check for callers that hand a
script to an execution engine.
"""

from __future__ import annotations

import math
import shlex

from domain.models import DSL_VERBS

MIN_CACHEABLE_LENGTH = 5

_ARITY = {"click": 1, "hover": 1, "type": 2, "upload": 2}


class DslSyntaxError(ValueError):
    """Raised when a script does not follow the DSL grammar."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


def validate_script(script: str | None) -> bool:
    """True iff the trimmed script is non-empty and longer than five characters."""
    if not script:
        return False
    trimmed = script.strip()
    return bool(trimmed) and len(trimmed) > MIN_CACHEABLE_LENGTH


def is_ignored_line(line: str) -> bool:
    stripped = line.strip()
    return not stripped or stripped.startswith("//")


def check_dsl_syntax(script: str) -> list[str]:
    """Return one message per malformed line; an empty list means valid."""
    errors: list[str] = []
    for number, raw in enumerate(script.splitlines(), start=1):
        if is_ignored_line(raw):
            continue
        line = raw.strip()
        verb, _, rest = line.partition(" ")
        rest = rest.strip()

        if verb not in DSL_VERBS:
            errors.append(f"line {number}: unknown command '{verb}'")
            continue

        if verb == "wait":
            if _parse_seconds(rest) is None:
                errors.append(f"line {number}: 'wait' takes one bare number of seconds")
            continue

        if not rest.startswith('"'):
            errors.append(f"line {number}: '{verb}' arguments must be double-quoted")
            continue
        try:
            args = shlex.split(rest, posix=True)
        except ValueError:
            errors.append(f"line {number}: unbalanced quotes")
            continue
        expected = _ARITY[verb]
        if len(args) != expected:
            errors.append(
                f"line {number}: '{verb}' takes {expected} argument(s), got {len(args)}"
            )
    return errors


def ensure_dsl_syntax(script: str) -> str:
    errors = check_dsl_syntax(script)
    if errors:
        raise DslSyntaxError(errors)
    return script


def _parse_seconds(text: str) -> float | None:
    if not text or " " in text:
        return None
    try:
        seconds = float(text)
    except ValueError:
        return None
    if math.isnan(seconds) or math.isinf(seconds) or seconds < 0:
        return None
    return seconds
