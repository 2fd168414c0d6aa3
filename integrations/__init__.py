"""Integration broker clients."""

from .composio_client import ComposioBroker, get_broker

__all__ = [
    "ComposioBroker",
    "get_broker",
]
