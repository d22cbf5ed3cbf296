"""Store configuration model.

This module owns the immutable descriptor naming a store, its backing
file, and its logical schema. Equality and hashing use the name only,
so registries keyed by configuration treat same-named stores as one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from core.errors import JsonStoreConfigError
from core.types import Schema


@dataclass(frozen=True)
class JsonStoreConfiguration:
    """Validated store configuration.

    Attributes:
        name: Store name; sole basis of equality and hashing.
        file_location: Path of the backing JSON document.
        schema: Logical schema; required before a store is constructed.
    """

    name: str
    file_location: Path = field(compare=False)
    schema: Schema | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise JsonStoreConfigError(
                f"Invalid store name {self.name!r}: expected a non-empty string. "
                "Name each store configuration."
            )
        if not isinstance(self.file_location, (str, Path)):
            raise JsonStoreConfigError(
                f"Invalid file location for store '{self.name}': "
                f"expected a path, got {type(self.file_location).__name__}."
            )
        object.__setattr__(self, "file_location", Path(self.file_location))

    @classmethod
    def for_file(
        cls,
        name: str,
        file_location: str | Path,
        schema: Schema | None = None,
    ) -> "JsonStoreConfiguration":
        """Build config with an absolute backing file path.

        Args:
            name: Store name.
            file_location: Backing file path; ``~`` is expanded.
            schema: Optional logical schema.

        Returns:
            A validated config object.

        Raises:
            JsonStoreConfigError: If values are invalid.
        """
        return cls(
            name=name,
            file_location=Path(file_location).expanduser().resolve(),
            schema=schema,
        )
