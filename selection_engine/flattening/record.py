"""Fixed-shape flattened records.

A ``RecordSchema`` declares every concept of a domain with its default value.
Records built from it always carry every field, so consumers never have to
distinguish "false" from "missing".
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

DATA_JSON = "data_json"
LAST_UPDATED = "last_updated"
FLATTENER_VERSION = "flattener_version"
BACKUP_FIELDS = (DATA_JSON, LAST_UPDATED, FLATTENER_VERSION)
UNMAPPED_KEY_COUNT = "unmapped_key_count"


def flags(*names: str) -> dict[str, bool]:
    return {name: False for name in names}


def counts(*names: str) -> dict[str, int]:
    return {name: 0 for name in names}


def nullable(*names: str) -> dict[str, None]:
    return {name: None for name in names}


class RecordSchema:
    """Concept names and defaults for one domain's record.

    Args:
        prefix: Domain prefix prepended to every field name
        fields: Concept name -> default value, in output order

    Raises:
        ValueError: If a concept collides with a backup field
    """

    def __init__(self, prefix: str, fields: Mapping[str, Any]) -> None:
        clashes = set(fields) & set(BACKUP_FIELDS)
        if clashes:
            raise ValueError(f"Concepts {sorted(clashes)} are reserved backup fields")
        self.prefix = prefix
        self._defaults: dict[str, Any] = dict(fields)

    def field_name(self, concept: str) -> str:
        return f"{self.prefix}_{concept}"

    @property
    def concepts(self) -> tuple[str, ...]:
        return tuple(self._defaults)

    @property
    def field_names(self) -> tuple[str, ...]:
        """Every prefixed field, backup fields last."""
        return tuple(self.field_name(c) for c in (*self._defaults, *BACKUP_FIELDS))

    def __contains__(self, concept: object) -> bool:
        return concept in self._defaults

    def __len__(self) -> int:
        return len(self._defaults) + len(BACKUP_FIELDS)

    def defaults(self) -> dict[str, Any]:
        """Fresh concept -> default mapping for a flatten call to fill in."""
        return dict(self._defaults)

    def build(
        self,
        values: Mapping[str, Any],
        *,
        data_json: str,
        last_updated: str,
        flattener_version: str,
    ) -> FlattenedRecord:
        unknown = set(values) - set(self._defaults)
        if unknown:
            raise KeyError(f"Values for undeclared concepts: {sorted(unknown)}")
        data = {self.field_name(c): values.get(c, d) for c, d in self._defaults.items()}
        data[self.field_name(DATA_JSON)] = data_json
        data[self.field_name(LAST_UPDATED)] = last_updated
        data[self.field_name(FLATTENER_VERSION)] = flattener_version
        return FlattenedRecord(self.prefix, data)


class FlattenedRecord(Mapping[str, Any]):
    """Read-only mapping of prefixed field names to values."""

    __slots__ = ("_prefix", "_data")

    def __init__(self, prefix: str, data: Mapping[str, Any]) -> None:
        self._prefix = prefix
        self._data = MappingProxyType(dict(data))

    @property
    def prefix(self) -> str:
        return self._prefix

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def concept(self, name: str) -> Any:
        """Value of an unprefixed concept (``record.concept("has_neck")``)."""
        return self._data[f"{self._prefix}_{name}"]

    @property
    def data_json(self) -> str:
        return self._data[f"{self._prefix}_{DATA_JSON}"]

    @property
    def last_updated(self) -> str:
        return self._data[f"{self._prefix}_{LAST_UPDATED}"]

    @property
    def flattener_version(self) -> str:
        return self._data[f"{self._prefix}_{FLATTENER_VERSION}"]

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    def without_timestamp(self) -> dict[str, Any]:
        """Every field except ``last_updated``, for comparing two flatten calls."""
        stamp = f"{self._prefix}_{LAST_UPDATED}"
        return {k: v for k, v in self._data.items() if k != stamp}

    def __repr__(self) -> str:
        return f"FlattenedRecord(prefix={self._prefix!r}, fields={len(self._data)})"
