"""Data models for confseek."""

from collections.abc import Callable
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING
from typing import Any

from .utils import data_get

if TYPE_CHECKING:
    from .formats import Codec


class SearchStrategy(Enum):
    """Directory traversal policy for configuration search.

    Determines whether a search ascends from its starting directory.
    """

    NONE = "none"
    PROJECT = "project"
    GLOBAL = "global"


class EnvStyle(Enum):
    """Layout of environment-specific files for encrypt/decrypt.

    SUFFIX rewrites ``config/app.json`` to ``config/app.production.json``;
    DIRECTORY rewrites it to ``config/production/app.json``.
    """

    SUFFIX = "suffix"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class SearchResult:
    """A configuration tree and the file it was loaded from.

    Attributes:
        config: Decoded configuration tree
        filepath: Source file (or directory, for directory loads)
        is_empty: True when the decoded tree was empty
    """

    config: Any
    filepath: str
    is_empty: bool = False

    @property
    def empty(self) -> bool:
        return self.is_empty or self.config == {} or self.config == []

    def get(self, key: str | None = None, default: Any = None) -> Any:
        """Read a dot-path key from the tree (the whole tree when key is None)."""
        if key is None:
            return self.config
        return data_get(self.config, key, default)

    def has(self, key: str) -> bool:
        return data_get(self.config, key) is not None

    def to_dict(self) -> dict[str, Any]:
        return {"config": self.config, "filepath": self.filepath, "is_empty": self.is_empty}


Transform = Callable[[SearchResult], Any]


@dataclass(frozen=True)
class SearchOptions:
    """Options controlling how a Searcher discovers configuration.

    Applications inject these to define their search policy; the same
    options object can be shared by every module of a ConfigManager.

    Attributes:
        search_places: Candidate paths relative to each directory, in priority
            order. ``{module}`` is replaced with the module name. Empty means
            the default search places.
        strategy: Traversal policy (default: NONE, never ascend)
        stop_dir: Directory at which ascent stops (GLOBAL defaults to home)
        package_prop: package.json property to read (default: module name)
        cache: Cache search and load results until explicitly cleared
        transform: Hook applied to every loaded SearchResult
        ignore_empty: Skip empty files and keep searching
        codecs: Extra codecs keyed by extension, overriding the defaults
        home: Home directory override (default: Path.home())
    """

    search_places: tuple[str, ...] = ()
    strategy: SearchStrategy = SearchStrategy.NONE
    stop_dir: Path | None = None
    package_prop: str | None = None
    cache: bool = True
    transform: Transform | None = None
    ignore_empty: bool = True
    codecs: Mapping[str, "Codec"] = field(default_factory=dict)
    home: Path | None = None


@dataclass(frozen=True)
class EncryptionSettings:
    """Defaults for encrypt/decrypt operations.

    Attributes:
        cipher: Cipher name ("AES-256-CBC" or "AES-128-CBC")
        env_style: How environment-specific paths are formed
        env_directory: Base directory for DIRECTORY style, relative to the
            file's own directory (None puts env directories beside the file)
    """

    cipher: str = "AES-256-CBC"
    env_style: EnvStyle = EnvStyle.SUFFIX
    env_directory: str | None = None


@dataclass(frozen=True)
class EncryptionResult:
    """Location of an encrypted file and the key that decrypts it.

    The key is always in transportable ``base64:`` form.
    """

    path: Path
    key: str
