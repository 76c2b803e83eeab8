from importlib.metadata import entry_points
from typing import Any, Dict, Type

from dbsampler_adapter_sdk import DatabaseAdapter
from dbsampler.common.logger import get_logger

logger = get_logger(__name__)

ENTRY_POINT_GROUP = "dbsampler.adapters"


def discover_adapters() -> Dict[str, Type[DatabaseAdapter]]:
    """Discovers installed adapters via 'dbsampler.adapters' entry points.

    Returns:
        Dict[str, Type[DatabaseAdapter]]: Dict mapping adapter name (e.g., 'postgres')
            to the Adapter Class.
    """
    adapters = {}
    for ep in entry_points(group=ENTRY_POINT_GROUP):
        try:
            AdapterCls = ep.load()
            adapters[ep.name] = AdapterCls
        except Exception as e:
            logger.error(f"Failed to load adapter {ep.name}: {e}")

    return adapters


def load_adapter(name: str, **kwargs: Any) -> DatabaseAdapter:
    """Instantiates the adapter registered under ``name``.

    Raises:
        ValueError: If no installed package provides the adapter.
    """
    available_adapters = discover_adapters()
    adapter_name = name.lower()
    if adapter_name not in available_adapters:
        raise ValueError(
            f"No adapter found for '{adapter_name}'. "
            f"Available: {sorted(available_adapters)}."
        )
    return available_adapters[adapter_name](**kwargs)
