from .discovery import discover_adapters, load_adapter
from .registry import ConnectionRegistry

__all__ = ["discover_adapters", "load_adapter", "ConnectionRegistry"]
