"""INI codec built on configparser.

Sections become nested dicts and keys above the first section live at the top
level. ``key[] = v`` lines accumulate into a list and ``key[sub] = v`` lines
into a dict. Unquoted values are typed: true/on/yes and false/off/no/none
become booleans, null becomes None, and numeric text becomes int or float.
"""

import configparser
import re
from typing import Any

from ..exceptions import ConfigEncodingError
from ..exceptions import LoaderError
from .base import Codec

_ROOT = "__root__"
_SECTION_RE = re.compile(r"^\s*\[([^\]]+)\]\s*$")
_APPEND_RE = re.compile(r"^([^=;#\s\[][^=\[]*?)\[\]\s*=")
_ITEM_RE = re.compile(r"^(.+)\[\]#\d+$")
_SUBKEY_RE = re.compile(r"^(.+)\[([^\]]+)\]$")
_NUMBER_RE = re.compile(r"^-?(\d+|\d*\.\d+)([eE][-+]?\d+)?$")

_TRUE = {"true", "on", "yes"}
_FALSE = {"false", "off", "no", "none"}


class IniCodec(Codec):
    name = "INI"
    extensions = ("ini",)

    def decode(self, text: str, source: str = "<string>") -> Any:
        parser = configparser.ConfigParser(
            interpolation=None, delimiters=("=",), default_section="__defaults__", strict=False
        )
        parser.optionxform = str  # type: ignore[assignment, method-assign]
        try:
            parser.read_string(f"[{_ROOT}]\n" + _number_appends(text), source=source)
        except configparser.Error as e:
            raise LoaderError(source, str(e), self.name) from e

        result: dict[str, Any] = {}
        for section in parser.sections():
            values = _collect(parser.items(section))
            if section == _ROOT:
                result.update(values)
            else:
                result[section] = values
        return result

    def encode(self, data: Any) -> str:
        if not isinstance(data, dict):
            raise ConfigEncodingError(self.name, "top-level value must be a mapping")

        lines: list[str] = []
        sections = {k: v for k, v in data.items() if isinstance(v, dict)}
        for key, value in data.items():
            if key not in sections:
                lines.extend(_format_entry(str(key), value))

        for name, values in sections.items():
            if lines:
                lines.append("")
            lines.append(f"[{name}]")
            for key, value in values.items():
                lines.extend(_format_entry(str(key), value))

        return "\n".join(lines) + "\n"


def _number_appends(text: str) -> str:
    """Give every ``key[]`` line a unique option name so configparser keeps them all.

    Leading whitespace is dropped; configparser would otherwise read indented
    lines as value continuations.
    """
    counter = 0
    out = []
    for line in text.splitlines():
        line = line.lstrip()
        if not _SECTION_RE.match(line):
            match = _APPEND_RE.match(line)
            if match:
                counter += 1
                line = f"{match.group(1).strip()}[]#{counter} =" + line[match.end() :]
        out.append(line)
    return "\n".join(out)


def _collect(items: list[tuple[str, str]]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for key, raw in items:
        value = _parse_value(raw)
        if match := _ITEM_RE.match(key):
            existing = values.setdefault(match.group(1), [])
            if isinstance(existing, list):
                existing.append(value)
        elif match := _SUBKEY_RE.match(key):
            existing = values.setdefault(match.group(1), {})
            if isinstance(existing, dict):
                existing[match.group(2)] = value
        else:
            values[key] = value
    return values


def _parse_value(raw: str) -> Any:
    value = raw.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1].replace(f"\\{value[0]}", value[0])

    lowered = value.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    if lowered == "null":
        return None
    if _NUMBER_RE.match(value):
        try:
            return int(value)
        except ValueError:
            return float(value)
    return value


def _format_entry(key: str, value: Any) -> list[str]:
    if isinstance(value, list):
        return [f"{key}[] = {_format_value(item)}" for item in value]
    if isinstance(value, dict):
        return [f"{key}[{sub}] = {_format_value(item)}" for sub, item in value.items()]
    return [f"{key} = {_format_value(value)}"]


def _format_value(value: Any) -> str:
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (dict, list)):
        raise ConfigEncodingError("INI", "values nested deeper than one section level are not supported")
    return '"' + str(value).replace('"', '\\"') + '"'
