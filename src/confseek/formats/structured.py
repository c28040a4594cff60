"""JSON, YAML, NEON and TOML codecs."""

import json
import tomllib
from typing import Any

import tomli_w
import yaml

from ..exceptions import ConfigEncodingError
from ..exceptions import LoaderError
from .base import Codec


class JsonCodec(Codec):
    name = "JSON"
    extensions = ("json",)

    def decode(self, text: str, source: str = "<string>") -> Any:
        try:
            return self._container(json.loads(text))
        except json.JSONDecodeError as e:
            raise LoaderError(source, str(e), self.name) from e

    def encode(self, data: Any) -> str:
        try:
            return json.dumps(data, indent=4, ensure_ascii=False) + "\n"
        except (TypeError, ValueError) as e:
            raise ConfigEncodingError(self.name, str(e)) from e


class YamlCodec(Codec):
    name = "YAML"
    extensions = ("yaml", "yml")

    def decode(self, text: str, source: str = "<string>") -> Any:
        try:
            return self._container(yaml.safe_load(text))
        except yaml.YAMLError as e:
            raise LoaderError(source, str(e), self.name) from e

    def encode(self, data: Any) -> str:
        try:
            return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True, indent=2)
        except yaml.YAMLError as e:
            raise ConfigEncodingError(self.name, str(e)) from e


class NeonCodec(YamlCodec):
    """NEON documents restricted to mappings, lists and scalars.

    That subset of NEON is written in YAML block syntax, and YAML block
    output is valid NEON.
    """

    name = "NEON"
    extensions = ("neon",)


class TomlCodec(Codec):
    """TOML via stdlib tomllib (read) and tomli-w (write).

    TOML has no null, so None values are dropped when encoding.
    """

    name = "TOML"
    extensions = ("toml",)

    def decode(self, text: str, source: str = "<string>") -> Any:
        try:
            return tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise LoaderError(source, str(e), self.name) from e

    def encode(self, data: Any) -> str:
        if not isinstance(data, dict):
            raise ConfigEncodingError(self.name, "top-level value must be a table")
        try:
            return tomli_w.dumps(_without_none(data))
        except (TypeError, ValueError) as e:
            raise ConfigEncodingError(self.name, str(e)) from e


def _without_none(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _without_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_without_none(v) for v in value if v is not None]
    return value
