from __future__ import annotations

from typing import Dict, List

from dbsampler_adapter_sdk import ConnectionHandle, ConnectionOptions, DatabaseAdapter
from dbsampler.common.logger import get_logger

logger = get_logger(__name__)


class ConnectionRegistry:
    """
    Manages named connection profiles and the handles opened for them.

    Connections are established lazily on first use and cached until
    ``close_all`` is called.
    """

    def __init__(self, adapter: DatabaseAdapter, profiles: Dict[str, ConnectionOptions]):
        """
        Initializes the registry with a set of profiles.

        Args:
            adapter: The adapter every profile connects through.
            profiles: A dictionary mapping connection names to ConnectionOptions.
        """
        self.adapter = adapter
        self._profiles = profiles
        self._handles: Dict[str, ConnectionHandle] = {}

    def get_profile(self, name: str) -> ConnectionOptions:
        if name not in self._profiles:
            raise ValueError(f"Unknown connection: {name}")
        return self._profiles[name]

    def get(self, name: str) -> ConnectionHandle:
        """
        Retrieves (or opens) the connection handle for ``name``.

        Raises:
            ValueError: If the name is not registered.
            ConnectError: If the adapter cannot connect.
        """
        if name not in self._handles:
            profile = self.get_profile(name)
            self._handles[name] = self.adapter.connect(profile)
            logger.info(f"Opened connection '{name}' via {self.adapter}")
        return self._handles[name]

    def close_all(self) -> None:
        handles, self._handles = self._handles, {}
        for name, handle in handles.items():
            self.adapter.disconnect(handle)
            logger.debug(f"Closed connection '{name}'")

    def list_profiles(self) -> List[ConnectionOptions]:
        """Returns a list of all registered profiles."""
        return list(self._profiles.values())
