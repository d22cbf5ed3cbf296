"""Explicit registry of open JSON stores.

Callers own a registry instance and pass it where stores are needed.
Stores are keyed by configuration, which compares by name only, so
two configurations sharing a name resolve to the same store.
"""

from __future__ import annotations

from core.config import JsonStoreConfiguration
from core.errors import JsonStoreRegistryError
from core.logging_config import get_logger
from store.json_store import JsonStore

_LOGGER = get_logger(__name__)


class StoreRegistry:
    """Name-keyed collection of JSON stores."""

    def __init__(self) -> None:
        self._stores: dict[JsonStoreConfiguration, JsonStore] = {}

    def open_store(
        self,
        configuration: JsonStoreConfiguration,
        migration_plan: object | None = None,
    ) -> JsonStore:
        """Return the registered store for a configuration, creating it once.

        Args:
            configuration: Store configuration.
            migration_plan: Forwarded to the store constructor; ignored there.

        Returns:
            Store registered under the configuration name.

        Raises:
            JsonStoreSchemaError: If a new store is built without a schema.
        """
        store = self._stores.get(configuration)
        if store is not None:
            return store
        store = JsonStore(configuration, migration_plan=migration_plan)
        self._stores[configuration] = store
        _LOGGER.info(
            "store_registered",
            store=configuration.name,
            path=str(configuration.file_location),
        )
        return store

    def get(self, name: str) -> JsonStore:
        """Look up a registered store by name.

        Raises:
            JsonStoreRegistryError: If no store has that name.
        """
        for configuration, store in self._stores.items():
            if configuration.name == name:
                return store
        raise JsonStoreRegistryError(
            f"No store named '{name}' is registered. Call open_store first."
        )

    def close_store(self, name: str) -> None:
        """Unregister a store by name; unknown names are ignored."""
        for configuration in list(self._stores):
            if configuration.name == name:
                del self._stores[configuration]

    def names(self) -> tuple[str, ...]:
        return tuple(configuration.name for configuration in self._stores)

    def __contains__(self, key: object) -> bool:
        if isinstance(key, JsonStoreConfiguration):
            return key in self._stores
        return isinstance(key, str) and key in self.names()

    def __len__(self) -> int:
        return len(self._stores)
