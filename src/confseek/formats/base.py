"""Codec contract and extension registry."""

import logging
from abc import ABC
from abc import abstractmethod
from pathlib import Path
from typing import Any

from ..exceptions import LoaderError
from ..exceptions import UnsupportedExtensionError

logger = logging.getLogger(__name__)


def extension_of(path: str | Path) -> str:
    """Return a file's lowercase extension without the dot.

    A dotfile with no further dot (``.myapprc``) has no extension.

    Examples:
        >>> extension_of("config/app.JSON")
        'json'
        >>> extension_of(".myapprc")
        ''
        >>> extension_of(".myapprc.yaml")
        'yaml'
    """
    name = Path(path).name
    if name.startswith(".") and "." not in name[1:]:
        return ""
    _, dot, ext = name.rpartition(".")
    return ext.lower() if dot else ""


class Codec(ABC):
    """Decoder/encoder for one configuration file format.

    Subclasses set ``name`` and ``extensions`` and implement ``decode`` and
    ``encode``. Decoding raises LoaderError; encoding raises
    ConfigEncodingError.
    """

    name: str = ""
    extensions: tuple[str, ...] = ()

    @abstractmethod
    def decode(self, text: str, source: str = "<string>") -> Any:
        """Parse text into a configuration tree.

        Args:
            text: Document contents
            source: Path or label used in error messages

        Returns:
            Dict or list; documents with a scalar top level decode to {}
        """

    @abstractmethod
    def encode(self, data: Any) -> str:
        """Serialize a configuration tree."""

    def load(self, path: str | Path) -> Any:
        """Read and decode a file. Empty files decode to {}."""
        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise LoaderError(path, f"Could not read file: {e}", self.name) from e
        if not text.strip():
            return {}
        return self.decode(text, str(path))

    def _container(self, data: Any) -> Any:
        return data if isinstance(data, (dict, list)) else {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class CodecRegistry:
    """Maps lowercase extensions to codec instances.

    Several extensions may share one codec (``yaml`` and ``yml``).
    """

    def __init__(self, codecs: list[Codec] | None = None):
        self._codecs: dict[str, Codec] = {}
        for codec in codecs or []:
            self.register(codec)

    def register(self, codec: Codec, extensions: list[str] | tuple[str, ...] | None = None) -> None:
        """Register a codec for its own extensions or an explicit list.

        Later registrations replace earlier ones for the same extension.
        """
        for ext in extensions if extensions is not None else codec.extensions:
            key = ext.lower().lstrip(".")
            if key in self._codecs:
                logger.debug(f"Replacing {self._codecs[key]!r} for '.{key}' with {codec!r}")
            self._codecs[key] = codec

    def get(self, extension: str) -> Codec:
        key = extension.lower().lstrip(".")
        try:
            return self._codecs[key]
        except KeyError:
            raise UnsupportedExtensionError(extension) from None

    def has_extension(self, extension: str) -> bool:
        return extension.lower().lstrip(".") in self._codecs

    def for_path(self, path: str | Path) -> Codec:
        """Resolve the codec for a file path by its extension."""
        return self.get(extension_of(path))

    def extensions(self) -> list[str]:
        return list(self._codecs)

    def copy(self) -> "CodecRegistry":
        clone = CodecRegistry()
        clone._codecs = dict(self._codecs)
        return clone
