"""Caching decorator for async resolver methods."""

import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

R = TypeVar("R")

logger = logging.getLogger(__name__)


def cached(
    key_builder: Callable[..., str],
):
    """
    Decorator for caching async method results in ``self._cache``.

    The cache's own TTL applies. Exceptions raised by the wrapped method are
    never cached, so failed lookups are retried on the next call.

    Args:
        key_builder: Function that takes the same args as decorated method
                    (without ``self``) and returns a cache key string.

    Usage:
        @cached(CacheKeys.domain)
        async def _resolve_normalized(self, name: str) -> DomainRecord:
            ...
    """

    def decorator(
        func: Callable[..., Awaitable[R]],
    ) -> Callable[..., Awaitable[R]]:
        @wraps(func)
        async def wrapper(self: Any, *args: Any, **kwargs: Any) -> R:
            cache = getattr(self, "_cache", None)
            if cache is None:
                return await func(self, *args, **kwargs)

            key = key_builder(*args, **kwargs)

            cached_value = cache.get(key)
            if cached_value is not None:
                logger.debug(f"Cache hit: {key}")
                return cached_value

            result = await func(self, *args, **kwargs)

            if result is not None:
                cache.put(key, result)

            return result

        return wrapper

    return decorator
