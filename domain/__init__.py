"""
Domain layer package.

This package contains the script synthesis engine, its models and the
ports it depends on, independent of any specific infrastructure.
"""

from .models import (  # noqa: F401
    AppConfig,
    CacheEntry,
    Click,
    DslRequest,
    DslResponse,
    Hover,
    Type,
    Upload,
    UserProfile,
    Wait,
)
from .ports import (  # noqa: F401
    CacheBackendError,
    CacheMaintenancePort,
    ClockPort,
    LLMClientPort,
    LoggerPort,
    PageFetcherPort,
    ScriptCachePort,
)

__all__ = [
    # Models
    "AppConfig",
    "UserProfile",
    "Click",
    "Hover",
    "Type",
    "Upload",
    "Wait",
    "CacheEntry",
    "DslRequest",
    "DslResponse",
    # Ports
    "CacheBackendError",
    "ScriptCachePort",
    "CacheMaintenancePort",
    "LLMClientPort",
    "PageFetcherPort",
    "ClockPort",
    "LoggerPort",
]
