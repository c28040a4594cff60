"""Environment variable interpolation for configuration values.

Supports patterns:
- ${VAR} - Replace with environment variable VAR (empty string if unset)
- ${VAR:-default} - Replace with VAR, or ``default`` if unset
"""

import os
import re
from collections.abc import Mapping
from typing import Any

VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def interpolate(value: Any, environ: Mapping[str, str] | None = None) -> Any:
    """Recursively substitute environment variables in a value.

    Dict keys are left alone. Numbers, booleans and None are returned
    unchanged and never stringified.

    Args:
        value: Value to process (string, dict, list or other)
        environ: Variable source (default: os.environ)

    Returns:
        Value with variables substituted

    Examples:
        >>> interpolate("${HOST:-localhost}", {})
        'localhost'
        >>> interpolate({"url": "http://${HOST}:${PORT:-80}"}, {"HOST": "db1"})
        {'url': 'http://db1:80'}
    """
    env = os.environ if environ is None else environ

    if isinstance(value, str):
        return _interpolate_string(value, env)
    if isinstance(value, dict):
        return {key: interpolate(item, env) for key, item in value.items()}
    if isinstance(value, list):
        return [interpolate(item, env) for item in value]
    return value


def _interpolate_string(text: str, env: Mapping[str, str]) -> str:
    def replacer(match: re.Match) -> str:
        name, default = match.group(1), match.group(2)
        if name in env:
            return env[name]
        return default if default is not None else ""

    return VAR_PATTERN.sub(replacer, text)
