"""Graph cache component package."""
from .cache_manager import GraphCacheManager
from .cache_policy import CachePolicy
from .flush import FlushProtocol
from .graph_cache import CacheEntry, GraphCache
from .realtime import RealtimeUpdateApplier, validate_updates

__all__ = [
    "CacheEntry",
    "CachePolicy",
    "FlushProtocol",
    "GraphCache",
    "GraphCacheManager",
    "RealtimeUpdateApplier",
    "validate_updates",
]
