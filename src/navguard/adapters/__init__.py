"""Adapters — the navigation surface and the external engine boundary."""

from navguard.adapters.engine import EngineAdapter, RouterEngine
from navguard.adapters.protocol import RouterAdapter

__all__ = [
    "EngineAdapter",
    "RouterAdapter",
    "RouterEngine",
]
