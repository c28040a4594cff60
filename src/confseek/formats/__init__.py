"""Pluggable configuration file codecs.

Each codec decodes one file format into a configuration tree and encodes a
tree back. ``default_registry()`` returns a registry covering every built-in
format; callers may register their own codecs on top.
"""

from .base import Codec
from .base import CodecRegistry
from .base import extension_of
from .ini import IniCodec
from .php import PhpCodec
from .structured import JsonCodec
from .structured import NeonCodec
from .structured import TomlCodec
from .structured import YamlCodec
from .xml import XmlCodec


def default_registry() -> CodecRegistry:
    """Create a registry with the built-in codecs.

    Returns:
        A new registry; mutating it does not affect other registries
    """
    return CodecRegistry(
        [
            JsonCodec(),
            YamlCodec(),
            PhpCodec(),
            IniCodec(),
            NeonCodec(),
            TomlCodec(),
            XmlCodec(),
        ]
    )


__all__ = [
    "Codec",
    "CodecRegistry",
    "default_registry",
    "extension_of",
    "IniCodec",
    "JsonCodec",
    "NeonCodec",
    "PhpCodec",
    "TomlCodec",
    "XmlCodec",
    "YamlCodec",
]
