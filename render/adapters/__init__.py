"""Video adapters package."""

from .base import BaseVideoAdapter
from .heygen import HeyGenAdapter

__all__ = [
    "BaseVideoAdapter",
    "HeyGenAdapter",
]
