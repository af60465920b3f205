from enum import Enum


class CacheKey(str, Enum):
    """
    Named entries of the public listing cache.

    The engine only emits these names after mutations; the cache itself
    lives in an external component (see services/cache_invalidation.py).
    """

    PRODUCTS = "products"
    CATEGORIES = "categories"
    PARAMETER_GROUPS = "parameter_groups"
    SPECIALS = "specials"
    HOME = "home"
