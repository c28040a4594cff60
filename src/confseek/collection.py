"""Ordered collection wrapper returned by ConfigManager.collection()."""

from collections.abc import Callable
from collections.abc import Iterator
from typing import Any

Predicate = Callable[[Any], bool]


class ConfigCollection:
    """Read-only convenience view over a configuration list or dict.

    Iteration yields values. Dict keys are preserved through ``filter``.

    Example:
        ```python
        hosts = manager.collection("app", "hosts")
        hosts.count()
        hosts.filter(lambda h: h.startswith("db")).first()
        ```
    """

    def __init__(self, items: list[Any] | dict[str, Any]):
        self._items = items

    def count(self) -> int:
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ConfigCollection):
            return self._items == other._items
        return self._items == other

    def __repr__(self) -> str:
        return f"ConfigCollection({self._items!r})"

    def is_empty(self) -> bool:
        return not self._items

    def keys(self) -> list[Any]:
        if isinstance(self._items, dict):
            return list(self._items)
        return list(range(len(self._items)))

    def values(self) -> list[Any]:
        if isinstance(self._items, dict):
            return list(self._items.values())
        return list(self._items)

    def contains(self, value: Any) -> bool:
        """Check for a value, or for any value matching a predicate."""
        if callable(value):
            return any(value(item) for item in self.values())
        return value in self.values()

    def filter(self, predicate: Predicate | None = None) -> "ConfigCollection":
        """Keep items matching predicate (truthy items when predicate is None)."""
        check = predicate or bool
        if isinstance(self._items, dict):
            return ConfigCollection({k: v for k, v in self._items.items() if check(v)})
        return ConfigCollection([item for item in self._items if check(item)])

    def first(self, predicate: Predicate | None = None, default: Any = None) -> Any:
        for item in self.values():
            if predicate is None or predicate(item):
                return item
        return default

    def last(self, predicate: Predicate | None = None, default: Any = None) -> Any:
        for item in reversed(self.values()):
            if predicate is None or predicate(item):
                return item
        return default

    def to_list(self) -> list[Any]:
        return self.values()

    def to_dict(self) -> dict[Any, Any]:
        """Items as a dict; list items are keyed by index."""
        return dict(zip(self.keys(), self.values()))

    def all(self) -> list[Any] | dict[str, Any]:
        """The underlying data (copied one level deep)."""
        return dict(self._items) if isinstance(self._items, dict) else list(self._items)
