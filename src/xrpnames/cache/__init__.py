"""In-memory caching layer."""

from .decorators import cached
from .keys import CacheKeys
from .memory import TTLCache

__all__ = [
    "CacheKeys",
    "TTLCache",
    "cached",
]
