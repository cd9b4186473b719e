"""Infrastructure models package exports."""
from .base import Base, metadata
from .token_cache import TokenCacheModel
from .token_mapping import TokenMappingModel

__all__ = [
    "Base",
    "metadata",
    "TokenCacheModel",
    "TokenMappingModel",
]
