"""Utility functions for confseek.

Dot-path access, merging and diffing over configuration trees. A tree is a
plain nested structure of dicts, lists and scalars as produced by a codec.
None of these functions mutate their arguments.
"""

from typing import Any


def _index(segment: str, container: list) -> int | None:
    """Return the list index a segment addresses, or None."""
    if not segment.isdigit():
        return None
    index = int(segment)
    return index if index < len(container) else None


def data_get(tree: Any, key: str | None, default: Any = None) -> Any:
    """Read a value by dot-path.

    Args:
        tree: Configuration tree
        key: Dot-separated path (``"db.host"``, ``"servers.0.name"``).
            None or empty returns the whole tree.
        default: Returned when any segment is missing

    Returns:
        The value at ``key`` or ``default``

    Examples:
        >>> data_get({"db": {"host": "localhost"}}, "db.host")
        'localhost'
        >>> data_get({"servers": [{"name": "a"}]}, "servers.0.name")
        'a'
        >>> data_get({"db": "sqlite"}, "db.host", "none")
        'none'
    """
    if not key:
        return tree

    current = tree
    for segment in key.split("."):
        if isinstance(current, dict) and segment in current:
            current = current[segment]
        elif isinstance(current, list) and (index := _index(segment, current)) is not None:
            current = current[index]
        else:
            return default
    return current


def data_has(tree: Any, key: str) -> bool:
    """Check whether a dot-path resolves to a non-null value.

    A stored None is indistinguishable from a missing key.
    """
    return data_get(tree, key) is not None


def data_set(tree: Any, key: str, value: Any) -> Any:
    """Write a value by dot-path, returning a new tree.

    Missing intermediate segments become dicts. A scalar (or a list addressed
    by a non-index segment) standing in the way is replaced by a dict without
    error. An index one past the end of a list appends; an index further out
    turns the list into a dict keyed by index, keeping its items. Containers
    along the path are copied; untouched siblings are shared.

    Examples:
        >>> data_set({}, "db.host", "localhost")
        {'db': {'host': 'localhost'}}
        >>> data_set({"db": "sqlite"}, "db.host", "localhost")
        {'db': {'host': 'localhost'}}
        >>> data_set({"ports": [80, 443]}, "ports.1", 8443)
        {'ports': [80, 8443]}
        >>> data_set({"ports": [80, 443]}, "ports.2", 8080)
        {'ports': [80, 443, 8080]}
        >>> data_set({"ports": [80]}, "ports.3", 8080)
        {'ports': {'0': 80, '3': 8080}}
    """
    if not key:
        return value

    head, _, rest = key.partition(".")
    if isinstance(tree, list) and (index := _index(head, tree)) is not None:
        items = list(tree)
        items[index] = data_set(items[index], rest, value) if rest else value
        return items

    if isinstance(tree, list) and head.isdigit() and int(head) == len(tree):
        return [*tree, data_set(None, rest, value) if rest else value]

    if isinstance(tree, list) and head.isdigit():
        result = {str(i): item for i, item in enumerate(tree)}
    else:
        result = dict(tree) if isinstance(tree, dict) else {}
    result[head] = data_set(result.get(head), rest, value) if rest else value
    return result


def data_forget(tree: Any, key: str) -> Any:
    """Remove a value by dot-path, returning a new tree (no-op if absent)."""
    if not key:
        return tree

    head, _, rest = key.partition(".")
    if isinstance(tree, list) and (index := _index(head, tree)) is not None:
        items = list(tree)
        if rest:
            items[index] = data_forget(items[index], rest)
        else:
            del items[index]
        return items

    if not isinstance(tree, dict) or head not in tree:
        return tree

    result = dict(tree)
    if rest:
        result[head] = data_forget(result[head], rest)
    else:
        del result[head]
    return result


def flatten(tree: Any, prefix: str = "") -> dict[str, Any]:
    """Flatten a tree to a dict of dotted leaf paths.

    Dicts and lists are walked; empty ones are kept as leaves.

    Examples:
        >>> flatten({"db": {"host": "h", "ports": [1, 2]}})
        {'db.host': 'h', 'db.ports.0': 1, 'db.ports.1': 2}
    """
    flat: dict[str, Any] = {}
    if isinstance(tree, dict):
        items = tree.items()
    elif isinstance(tree, list):
        items = ((str(i), v) for i, v in enumerate(tree))
    else:
        return {prefix: tree} if prefix else {}

    for key, value in items:
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, (dict, list)) and value:
            flat.update(flatten(value, path))
        else:
            flat[path] = value
    return flat


def deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries with overlay precedence.

    Recursively merges nested dictionaries. Non-dict values in overlay
    completely replace corresponding values in base.

    Args:
        base: Base dictionary
        overlay: Overlay dictionary (takes precedence)

    Returns:
        New merged dictionary (base and overlay are not modified)

    Examples:
        >>> base = {"a": 1, "b": {"c": 2, "d": 3}}
        >>> overlay = {"b": {"c": 20}, "e": 5}
        >>> deep_merge(base, overlay)
        {'a': 1, 'b': {'c': 20, 'd': 3}, 'e': 5}

        >>> deep_merge({}, {"a": 1})
        {'a': 1}

        >>> deep_merge({"a": 1}, {})
        {'a': 1}
    """
    result = base.copy()

    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            # Both base and overlay have dict at this key - recurse
            result[key] = deep_merge(result[key], value)
        else:
            # Overlay wins - replace completely
            result[key] = value

    return result


def shallow_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Merge top-level keys only; overlay values replace base values outright.

    Examples:
        >>> shallow_merge({"x": {"a": 1, "b": 2}}, {"x": {"a": 9}})
        {'x': {'a': 9}}
    """
    return {**base, **overlay}


def diff(original: Any, modified: Any) -> dict[str, dict[str, Any]]:
    """Compare two trees leaf by leaf.

    Args:
        original: Tree before changes
        modified: Tree after changes

    Returns:
        Dict with ``added`` and ``removed`` (dotted path -> value) and
        ``changed`` (dotted path -> {"from": old, "to": new}). Unchanged
        leaves are omitted.
    """
    original_flat = flatten(original)
    modified_flat = flatten(modified)

    added: dict[str, Any] = {}
    removed: dict[str, Any] = {}
    changed: dict[str, Any] = {}

    for key, value in original_flat.items():
        if key not in modified_flat:
            removed[key] = value
        elif not same(modified_flat[key], value):
            changed[key] = {"from": value, "to": modified_flat[key]}

    for key, value in modified_flat.items():
        if key not in original_flat:
            added[key] = value

    return {"added": added, "removed": removed, "changed": changed}


def same(a: Any, b: Any) -> bool:
    """Structural equality that does not conflate True with 1 or 1 with 1.0.

    Examples:
        >>> same({"debug": 1}, {"debug": 1})
        True
        >>> same({"debug": 1}, {"debug": True})
        False
    """
    if a is b:
        return True
    if type(a) is not type(b):
        return False
    if isinstance(a, dict):
        return a.keys() == b.keys() and all(same(a[key], b[key]) for key in a)
    if isinstance(a, list):
        return len(a) == len(b) and all(same(x, y) for x, y in zip(a, b))
    return a == b
