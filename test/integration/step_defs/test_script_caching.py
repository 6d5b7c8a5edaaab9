"""Step definitions live in conftest.py; this module binds the scenarios."""
from __future__ import annotations

from pytest_bdd import scenarios

scenarios("../features/script_caching.feature")
