"""Application layer: the request/response boundary."""

from .facade import DslFacade, SyntaxReport

__all__ = ["DslFacade", "SyntaxReport"]
