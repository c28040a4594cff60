"""Configuration file discovery for a single module.

A Searcher looks for a module's configuration in an ordered list of
candidate paths ("search places"), first in the starting directory and then,
depending on the strategy, in each parent directory.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

from .exceptions import ConfigFileNotFoundError
from .exceptions import InvalidModuleNameError
from .exceptions import LoaderError
from .exceptions import MissingPackagePropertyError
from .exceptions import UnsupportedExtensionError
from .formats import Codec
from .formats import CodecRegistry
from .formats import default_registry
from .formats import extension_of
from .models import SearchOptions
from .models import SearchResult
from .models import SearchStrategy

logger = logging.getLogger(__name__)

MODULE_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")

# Files whose presence marks a project root for SearchStrategy.PROJECT
PROJECT_MARKERS = ("composer.json", "package.json")

# Extensions probed in ~/.config/{module}/config.{ext} for SearchStrategy.GLOBAL
GLOBAL_CONFIG_EXTENSIONS = ("json", "yaml", "yml", "php", "ini")

_RC_EXTENSIONS = ("", "json", "yaml", "yml", "php", "ini", "neon", "toml", "xml")
_CONFIG_EXTENSIONS = ("php", "json", "neon", "xml")


def default_search_places(module_name: str) -> tuple[str, ...]:
    """Build the default candidate list for a module, in priority order.

    package.json comes first, then ``.{module}rc`` with each extension, then
    the same names under ``.config/``, then ``{module}.config.{ext}``.
    """
    rc_files = [f".{module_name}rc" + (f".{ext}" if ext else "") for ext in _RC_EXTENSIONS]
    return (
        "package.json",
        *rc_files,
        *(f".config/{name}" for name in rc_files),
        *(f"{module_name}.config.{ext}" for ext in _CONFIG_EXTENSIONS),
    )


class Searcher:
    """Finds and loads configuration files for one module.

    Results are cached per starting directory (search) and per file (load)
    until one of the clear methods is called.

    Args:
        module_name: Module to search for; letters, digits, "-" and "_" only
        options: Search policy (default: SearchOptions())
        registry: Codecs to use (default: the built-in codecs). The registry
            is copied, so later registrations do not leak between searchers.

    Raises:
        InvalidModuleNameError: If module_name is empty or malformed
    """

    def __init__(
        self,
        module_name: str,
        options: SearchOptions | None = None,
        registry: CodecRegistry | None = None,
    ):
        if not module_name or not MODULE_NAME_RE.match(module_name):
            raise InvalidModuleNameError(module_name)

        self.module_name = module_name
        self.options = options or SearchOptions()
        self.registry = registry.copy() if registry is not None else default_registry()
        for extension, codec in self.options.codecs.items():
            self.registry.register(codec, [extension])

        if self.options.search_places:
            self.search_places = tuple(place.replace("{module}", module_name) for place in self.options.search_places)
        else:
            self.search_places = default_search_places(module_name)

        self._load_cache: dict[str, SearchResult] = {}
        self._search_cache: dict[tuple[str, str], SearchResult | None] = {}

    # ===== Public API =====

    def search(self, start: str | Path | None = None) -> SearchResult | None:
        """Search for configuration starting at a directory (or a file's directory).

        Args:
            start: Starting directory or file (default: current directory)

        Returns:
            First non-skipped result, or None if nothing was found
        """
        start_path = Path(start) if start is not None else Path.cwd()
        resolved = start_path.resolve()
        cache_key = (self.module_name, str(resolved))

        if self.options.cache and cache_key in self._search_cache:
            logger.debug(f"Search cache hit for '{self.module_name}' from {resolved}")
            return self._search_cache[cache_key]

        result = self._search_from(resolved if resolved.is_dir() else resolved.parent)

        if self.options.cache:
            self._search_cache[cache_key] = result
        return result

    def load(self, path: str | Path) -> SearchResult:
        """Load a single configuration file, bypassing directory search.

        Args:
            path: File to load

        Returns:
            Loaded result

        Raises:
            ConfigFileNotFoundError: If the file is missing or unreadable
            LoaderError: If the file cannot be parsed
            UnsupportedExtensionError: If no codec handles the extension
        """
        filepath = Path(path)
        cache_key = str(filepath.absolute())

        if self.options.cache and cache_key in self._load_cache:
            logger.debug(f"Load cache hit for {cache_key}")
            return self._load_cache[cache_key]

        if not _is_readable_file(filepath):
            raise ConfigFileNotFoundError(filepath)

        result = self._load_file(filepath)

        if self.options.cache:
            self._load_cache[cache_key] = result
        return result

    def codec_for(self, path: str | Path) -> Codec:
        """Resolve the codec for a file by its extension.

        Raises:
            UnsupportedExtensionError: If no codec handles the extension
        """
        return self.registry.for_path(path)

    def has_codec(self, extension: str) -> bool:
        return self.registry.has_extension(extension)

    def clear_load_cache(self) -> None:
        self._load_cache.clear()

    def clear_search_cache(self) -> None:
        self._search_cache.clear()

    def clear_caches(self) -> None:
        self.clear_load_cache()
        self.clear_search_cache()

    # ===== Directory Walk =====

    def _search_from(self, directory: Path) -> SearchResult | None:
        stop_dir = self._stop_dir()

        while True:
            result = self._probe(directory)
            if result is not None:
                return result

            if self._should_stop(directory, stop_dir):
                break

            parent = directory.parent
            if parent == directory:
                break
            logger.debug(f"No '{self.module_name}' configuration in {directory}, ascending to {parent}")
            directory = parent

        if self.options.strategy is SearchStrategy.GLOBAL:
            return self._search_global()
        return None

    def _probe(self, directory: Path) -> SearchResult | None:
        for place in self.search_places:
            filepath = directory / place
            if not _is_readable_file(filepath):
                continue

            try:
                result = self._load_file(filepath)
            except (LoaderError, UnsupportedExtensionError) as e:
                logger.debug(f"Skipping {filepath}: {e}")
                continue

            if self.options.ignore_empty and result.empty:
                logger.debug(f"Skipping empty configuration {filepath}")
                continue
            return result
        return None

    def _should_stop(self, directory: Path, stop_dir: Path | None) -> bool:
        if stop_dir is not None and directory == stop_dir:
            return True

        strategy = self.options.strategy
        if strategy is SearchStrategy.NONE:
            return True
        if strategy is SearchStrategy.PROJECT:
            return any((directory / marker).exists() for marker in PROJECT_MARKERS)
        return False

    def _stop_dir(self) -> Path | None:
        if self.options.stop_dir is not None:
            return Path(self.options.stop_dir).resolve()
        if self.options.strategy is SearchStrategy.GLOBAL:
            home = self._home()
            return home.resolve() if home is not None else None
        return None

    def _home(self) -> Path | None:
        if self.options.home is not None:
            return Path(self.options.home)
        try:
            return Path.home()
        except RuntimeError:
            return None

    def _search_global(self) -> SearchResult | None:
        home = self._home()
        if home is None:
            return None

        config_dir = home / ".config" / self.module_name
        if not config_dir.is_dir():
            return None

        for ext in GLOBAL_CONFIG_EXTENSIONS:
            filepath = config_dir / f"config.{ext}"
            if not _is_readable_file(filepath):
                continue
            try:
                return self._load_file(filepath)
            except (LoaderError, UnsupportedExtensionError) as e:
                logger.debug(f"Skipping {filepath}: {e}")
        return None

    # ===== File Loading =====

    def _load_file(self, filepath: Path) -> SearchResult:
        if filepath.name.endswith("package.json"):
            return self._load_package_json(filepath)

        if extension_of(filepath) == "":
            return self._load_extensionless(filepath)

        config = self.codec_for(filepath).load(filepath)
        return self._result(config, filepath)

    def _load_package_json(self, filepath: Path) -> SearchResult:
        data = self.registry.get("json").load(filepath)
        prop = self.options.package_prop or self.module_name

        if not isinstance(data, dict) or prop not in data:
            raise MissingPackagePropertyError(filepath, prop)

        config = data[prop]
        if not isinstance(config, (dict, list)):
            config = {"value": config}
        return self._result(config, filepath)

    def _load_extensionless(self, filepath: Path) -> SearchResult:
        """Load an rc-style dotfile as JSON, falling back to YAML."""
        try:
            config = self.registry.get("json").load(filepath)
        except LoaderError:
            config = self.registry.get("yaml").load(filepath)
        return self._result(config, filepath)

    def _result(self, config: Any, filepath: Path) -> SearchResult:
        result = SearchResult(config, str(filepath), _is_empty(config))
        transform = self.options.transform
        if transform is None:
            return result

        transformed = transform(result)
        if isinstance(transformed, SearchResult):
            return transformed
        if isinstance(transformed, (dict, list)):
            return SearchResult(transformed, result.filepath, result.is_empty)
        return result


def _is_readable_file(path: Path) -> bool:
    return path.is_file() and os.access(path, os.R_OK)


def _is_empty(config: Any) -> bool:
    return config == {} or config == []
