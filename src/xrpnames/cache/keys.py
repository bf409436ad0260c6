"""Cache key builders for consistent key formatting."""


class CacheKeys:
    """
    Cache key builders for consistent key formatting.

    Domain and owner entries share one cache, so each key carries its keyspace.
    """

    PREFIX = "xrpnames"

    @classmethod
    def domain(cls, name: str) -> str:
        """Key for a resolved domain record by normalized name."""
        return f"{cls.PREFIX}:domain:{name}"

    @classmethod
    def owner(cls, address: str) -> str:
        """Key for the domain records held by an address."""
        return f"{cls.PREFIX}:owner:{address}"
