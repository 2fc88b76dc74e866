"""Core utilities and shared components for prefix-walk."""

from .config import settings
from .exceptions import PrefixWalkError, StoreError, ValidationError
from .observability import get_logger, get_tracer

__all__ = [
    "settings",
    "PrefixWalkError",
    "StoreError",
    "ValidationError",
    "get_logger",
    "get_tracer",
]
