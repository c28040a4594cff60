"""Configuration manager for discovered module configurations."""

import copy
import logging
import math
import os
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .collection import ConfigCollection
from .crypto import AesCbcCipher
from .crypto import Cipher
from .crypto import format_key
from .crypto import generate_key
from .crypto import parse_key
from .exceptions import ConfigDirectoryNotFoundError
from .exceptions import ConfigFileError
from .exceptions import ConfigFileNotFoundError
from .exceptions import ConfigModuleNotFoundError
from .exceptions import DecryptionError
from .exceptions import EncryptionError
from .exceptions import InvalidArrayValueError
from .exceptions import InvalidBooleanValueError
from .exceptions import InvalidConfigurationError
from .exceptions import InvalidFloatValueError
from .exceptions import InvalidIntegerValueError
from .exceptions import InvalidStringValueError
from .exceptions import ModuleNotLoadedError
from .exceptions import ReadOnlyConfigurationError
from .exceptions import UnsupportedExtensionError
from .formats import Codec
from .formats import CodecRegistry
from .formats import default_registry
from .interpolation import interpolate
from .models import EncryptionResult
from .models import EncryptionSettings
from .models import EnvStyle
from .models import SearchOptions
from .models import SearchResult
from .searcher import Searcher
from .utils import data_forget
from .utils import data_get
from .utils import data_has
from .utils import data_set
from .utils import deep_merge
from .utils import diff
from .utils import same
from .utils import shallow_merge

logger = logging.getLogger(__name__)

CipherFactory = Callable[[bytes, str], Cipher]

ENCRYPTED_SUFFIX = ".encrypted"

_DIFF_MODULE = "__diff__"
_NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")
_INTEGER_RE = re.compile(r"^\s*[+-]?\d+\s*$")
_TRUTHY = {"true", "1", "yes", "on"}
_FALSY = {"false", "0", "no", "off", ""}


class ConfigManager:
    """Loads, mutates and persists configuration for named modules.

    Each module is bound to the configuration found for it (by directory
    search or direct load) and keeps two trees: the snapshot as loaded or
    last saved, and a working copy that set/forget/push/prepend modify.
    Nothing touches disk until ``save``.

    Args:
        options: Default search options for every module
        encryption: Defaults for encrypt/decrypt
        cipher_factory: Builds a Cipher from raw key bytes and a cipher name
    """

    def __init__(
        self,
        options: SearchOptions | None = None,
        encryption: EncryptionSettings | None = None,
        cipher_factory: CipherFactory = AesCbcCipher,
    ):
        """Initialize configuration manager with injected policy.

        Args:
            options: SearchOptions applied to modules without their own
            encryption: EncryptionSettings used when encrypt/decrypt
                arguments are omitted
            cipher_factory: Cipher constructor (default: AesCbcCipher)
        """
        self.options = options or SearchOptions()
        self.encryption = encryption or EncryptionSettings()
        self.cipher_factory = cipher_factory

        self.registry: CodecRegistry = default_registry()
        for extension, codec in self.options.codecs.items():
            self.registry.register(codec, [extension])

        self._searchers: dict[str, Searcher] = {}
        self._results: dict[str, SearchResult] = {}
        self._working: dict[str, Any] = {}

    # ===== Discovery =====

    def searcher(self, module: str, options: SearchOptions | None = None) -> Searcher:
        """Get the Searcher for a module, creating it on first use.

        Args:
            module: Module name
            options: Options for a new searcher (default: manager options).
                Ignored once the module's searcher exists.

        Returns:
            The module's Searcher
        """
        if module not in self._searchers:
            self._searchers[module] = Searcher(module, options or self.options, self.registry)
        return self._searchers[module]

    def search(self, module: str, start: str | Path | None = None) -> SearchResult | None:
        """Search for a module's configuration and bind it to the module.

        Args:
            module: Module name
            start: Starting directory (default: current directory)

        Returns:
            The result, or None if nothing was found (module left unchanged)
        """
        result = self.searcher(module).search(start)
        if result is not None:
            self._bind(module, result)
        return result

    def load(self, path: str | Path, module: str = "default") -> SearchResult:
        """Load a file directly and bind it to a module.

        Raises:
            ConfigFileNotFoundError: If the file doesn't exist
            LoaderError: If the file cannot be parsed
        """
        result = self.searcher(module).load(path)
        self._bind(module, result)
        return result

    def load_directory(
        self,
        directory: str | Path,
        module: str = "default",
        pattern: str = "*",
        key_pattern: str | re.Pattern | None = None,
    ) -> SearchResult:
        """Load every matching file in a directory into one tree.

        Each file becomes a top-level key: its name without extension, or the
        first group of ``key_pattern`` matched against the file name. Files
        without a codec are skipped. Subdirectories are not descended.

        Args:
            directory: Directory to scan
            module: Module to bind the combined tree to
            pattern: Glob pattern for file names
            key_pattern: Regex with one capture group producing the key

        Returns:
            Result whose config maps keys to decoded files

        Raises:
            ConfigDirectoryNotFoundError: If directory doesn't exist
        """
        root = Path(directory)
        if not root.is_dir():
            raise ConfigDirectoryNotFoundError(root)

        searcher = self.searcher(module)
        config: dict[str, Any] = {}
        for filepath in sorted(root.glob(pattern)):
            if not filepath.is_file():
                continue
            try:
                codec = searcher.codec_for(filepath)
            except UnsupportedExtensionError:
                logger.debug(f"Skipping {filepath}: no codec for its extension")
                continue
            config[_key_for(filepath, key_pattern)] = codec.load(filepath)

        result = SearchResult(config, str(root), not config)
        self._bind(module, result)
        return result

    # ===== Reading and Writing Values =====

    def get(self, module: str, key: str | None = None, default: Any = None) -> Any:
        """Get a value by dot-path, searching for the module if not yet loaded.

        Args:
            module: Module name
            key: Dot-path; None returns the whole tree
            default: Returned when the key or the module is missing

        Returns:
            The value or default. Lists and mappings are copies, so changing
            them leaves the working tree alone.
        """
        if not self._ensure_loaded(module):
            return default
        value = data_get(self._working[module], key, default)
        if isinstance(value, (dict, list)):
            return copy.deepcopy(value)
        return value

    def has(self, module: str, key: str) -> bool:
        """Check for a non-null value at a dot-path.

        A key holding None reports False, the same as a missing key.
        """
        if not self._ensure_loaded(module):
            return False
        return data_has(self._working[module], key)

    def set(self, module: str, key: str, value: Any) -> "ConfigManager":
        """Set a value by dot-path in the working tree.

        An unknown module that cannot be found starts from an empty tree.
        """
        if not self._ensure_loaded(module):
            self._working[module] = {}
        self._working[module] = data_set(self._working[module], key, value)
        return self

    def forget(self, module: str, key: str) -> "ConfigManager":
        """Remove a value by dot-path (no-op if absent or module unknown)."""
        if self._ensure_loaded(module):
            self._working[module] = data_forget(self._working[module], key)
        return self

    def push(self, module: str, key: str, value: Any) -> "ConfigManager":
        """Append to the list at key; a non-list value becomes a one-item list first."""
        return self.set(module, key, [*self._as_list(module, key), value])

    def prepend(self, module: str, key: str, value: Any) -> "ConfigManager":
        """Prepend to the list at key; a non-list value becomes a one-item list first."""
        return self.set(module, key, [value, *self._as_list(module, key)])

    # ===== Persistence and State =====

    def save(self, module: str, path: str | Path | None = None) -> "ConfigManager":
        """Write a module's working tree to disk.

        Args:
            module: Module name
            path: Target file (default: the file the module was loaded from).
                Its extension selects the codec.

        Raises:
            ConfigModuleNotFoundError: If the module is unknown, or has no
                source file and no path is given
            ReadOnlyConfigurationError: If the target is not writable
            UnsupportedExtensionError: If no codec handles the target
        """
        if not self._ensure_loaded(module) or (path is None and module not in self._results):
            raise ConfigModuleNotFoundError(module, Path.cwd())

        target = Path(path) if path is not None else Path(self._results[module].filepath)
        if not os.access(target.parent, os.W_OK) or (target.exists() and not os.access(target, os.W_OK)):
            raise ReadOnlyConfigurationError(target)

        working = self._working[module]
        self._write(target, self.searcher(module).codec_for(target).encode(working))
        self._results[module] = SearchResult(copy.deepcopy(working), str(target), not working)
        logger.info(f"Saved '{module}' configuration to {target}")
        return self

    def is_dirty(self, module: str) -> bool:
        """Check whether the working tree differs from the loaded/saved snapshot."""
        if module not in self._results or module not in self._working:
            return False
        return not same(self._results[module].config, self._working[module])

    def rollback(self, module: str) -> "ConfigManager":
        """Discard unsaved changes (no-op for unknown modules)."""
        if module in self._results:
            self._working[module] = copy.deepcopy(self._results[module].config)
        return self

    def filepath(self, module: str) -> str | None:
        result = self._results.get(module)
        return result.filepath if result is not None else None

    def original(self, module: str) -> SearchResult | None:
        """The module's snapshot as loaded or last saved."""
        return self._results.get(module)

    def is_loaded(self, module: str) -> bool:
        return module in self._results

    def loaded_modules(self) -> list[str]:
        return list(self._results)

    def clear_cache(self, module: str | None = None) -> "ConfigManager":
        """Forget loaded modules and clear searcher caches.

        Args:
            module: Module to clear (default: all modules)
        """
        if module is None:
            for searcher in self._searchers.values():
                searcher.clear_caches()
            self._results.clear()
            self._working.clear()
            return self

        if module in self._searchers:
            self._searchers[module].clear_caches()
        self._results.pop(module, None)
        self._working.pop(module, None)
        return self

    def clear_search_cache(self, module: str | None = None) -> "ConfigManager":
        for searcher in self._selected_searchers(module):
            searcher.clear_search_cache()
        return self

    def clear_load_cache(self, module: str | None = None) -> "ConfigManager":
        for searcher in self._selected_searchers(module):
            searcher.clear_load_cache()
        return self

    # ===== Format Operations =====

    def codec(self, extension: str) -> Codec:
        """Get the codec registered for an extension.

        Raises:
            UnsupportedExtensionError: If none is registered
        """
        return self.registry.get(extension)

    def to_format(self, module: str, fmt: str) -> str:
        """Encode a module's working tree in another format without writing it.

        Raises:
            ConfigModuleNotFoundError: If the module cannot be loaded
            UnsupportedExtensionError: If no codec handles fmt
        """
        if not self._ensure_loaded(module):
            raise ConfigModuleNotFoundError(module, Path.cwd())
        return self.searcher(module).registry.get(fmt).encode(self._working[module])

    def convert(self, source: str | Path, destination: str | Path) -> "ConfigManager":
        """Rewrite a configuration file in the format of the destination's extension.

        Raises:
            ConfigFileNotFoundError: If source doesn't exist
            ReadOnlyConfigurationError: If the destination directory doesn't exist
        """
        data = self._read(Path(source))
        target = Path(destination)
        encoded = self.registry.for_path(target).encode(data)
        self._ensure_directory(target)
        self._write(target, encoded)
        logger.info(f"Converted {source} to {target}")
        return self

    def combine(self, destination: str | Path, sources: list[str | Path], deep: bool = True) -> "ConfigManager":
        """Merge several files in order and write the result.

        Later files take precedence. With ``deep`` nested mappings are merged
        key by key; otherwise top-level keys are replaced wholesale. Lists
        are always replaced.

        Raises:
            InvalidConfigurationError: If sources is empty or a source is not a mapping
            ConfigFileNotFoundError: If a source doesn't exist
            ReadOnlyConfigurationError: If the destination directory doesn't exist
        """
        if not sources:
            raise InvalidConfigurationError("At least one source file is required to combine configuration")

        merge = deep_merge if deep else shallow_merge
        combined: dict[str, Any] = {}
        for source in sources:
            data = self._read(Path(source))
            if not isinstance(data, dict):
                raise InvalidConfigurationError(f"Cannot combine {source}: top-level value is not a mapping")
            combined = merge(combined, data)

        target = Path(destination)
        encoded = self.registry.for_path(target).encode(combined)
        self._ensure_directory(target)
        self._write(target, encoded)
        logger.info(f"Combined {len(sources)} files into {target}")
        return self

    # ===== Typed Accessors =====

    def string(self, module: str, key: str) -> str:
        """Get a value as a string.

        Numbers are rendered in decimal; True is "1" and False is "".

        Raises:
            InvalidStringValueError: For null, missing or array values
        """
        value = self.get(module, key)
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "1" if value else ""
        if isinstance(value, (int, float)):
            return str(value)
        raise InvalidStringValueError(module, key, _kind(value))

    def integer(self, module: str, key: str) -> int:
        """Get a value as an integer; floats and numeric strings are truncated.

        Raises:
            InvalidIntegerValueError: For null, missing, array, boolean or
                non-numeric string values, and for infinite or NaN numbers
        """
        value = self.get(module, key)
        if isinstance(value, bool):
            raise InvalidIntegerValueError(module, key, "scalar")
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            if not math.isfinite(value):
                raise InvalidIntegerValueError(module, key, "scalar")
            return int(value)
        if isinstance(value, str):
            if _INTEGER_RE.match(value):
                return int(value)
            if _NUMERIC_RE.match(value):
                number = float(value)
                if not math.isfinite(number):
                    raise InvalidIntegerValueError(module, key, "scalar")
                return int(number)
            raise InvalidIntegerValueError(module, key, "non-numeric string")
        raise InvalidIntegerValueError(module, key, _kind(value))

    def float(self, module: str, key: str) -> float:
        """Get a value as a float.

        Raises:
            InvalidFloatValueError: For null, missing, array, boolean or
                non-numeric string values
        """
        value = self.get(module, key)
        if isinstance(value, bool):
            raise InvalidFloatValueError(module, key, "scalar")
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            if _NUMERIC_RE.match(value):
                return float(value)
            raise InvalidFloatValueError(module, key, "non-numeric string")
        raise InvalidFloatValueError(module, key, _kind(value))

    def boolean(self, module: str, key: str) -> bool:
        """Get a value as a boolean.

        Accepts True/False, 1/0, and the strings true/false, 1/0, yes/no,
        on/off and "" (case-insensitive).

        Raises:
            InvalidBooleanValueError: For null, missing, array or any other value
        """
        value = self.get(module, key)
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return value == 1
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in _TRUTHY:
                return True
            if normalized in _FALSY:
                return False
            raise InvalidBooleanValueError(module, key, "non-boolean string")
        raise InvalidBooleanValueError(module, key, _kind(value))

    def array(self, module: str, key: str) -> list[Any] | dict[str, Any]:
        """Get a list or mapping value as a copy.

        Raises:
            InvalidArrayValueError: For null, missing or scalar values
        """
        value = self.get(module, key)
        if isinstance(value, (dict, list)):
            return value
        raise InvalidArrayValueError(module, key, _kind(value))

    def collection(self, module: str, key: str) -> ConfigCollection:
        """Get a list or mapping value wrapped in a ConfigCollection.

        Raises:
            InvalidArrayValueError: For null, missing or scalar values
        """
        return ConfigCollection(self.array(module, key))

    # ===== Diffing =====

    def diff(self, original: Any, modified: Any) -> dict[str, dict[str, Any]]:
        """Compare two trees; see utils.diff."""
        return diff(original, modified)

    def diff_modules(self, module_a: str, module_b: str) -> dict[str, dict[str, Any]]:
        """Compare the working trees of two modules.

        Raises:
            ModuleNotLoadedError: If either module cannot be loaded
        """
        config_a = self.get(module_a)
        config_b = self.get(module_b)
        if not isinstance(config_a, (dict, list)):
            raise ModuleNotLoadedError(module_a)
        if not isinstance(config_b, (dict, list)):
            raise ModuleNotLoadedError(module_b)
        return diff(config_a, config_b)

    def diff_files(self, path_a: str | Path, path_b: str | Path) -> dict[str, dict[str, Any]]:
        """Compare two files without binding either to a module."""
        searcher = self.searcher(_DIFF_MODULE)
        try:
            config_a = searcher.load(path_a).config
            config_b = searcher.load(path_b).config
        finally:
            searcher.clear_load_cache()
        return diff(config_a, config_b)

    # ===== Interpolation =====

    def interpolate(self, value: Any) -> Any:
        """Replace ${VAR} and ${VAR:-default} in strings with environment values."""
        return interpolate(value)

    def get_interpolated(self, module: str, key: str | None = None, default: Any = None) -> Any:
        return interpolate(self.get(module, key, default))

    # ===== Encryption =====

    def encrypt(
        self,
        path: str | Path,
        key: str | None = None,
        cipher: str | None = None,
        prune: bool = False,
        force: bool = False,
        env: str | None = None,
        env_style: EnvStyle | str | None = None,
    ) -> EncryptionResult:
        """Encrypt a file to ``<path>.encrypted``.

        Args:
            path: Plaintext file
            key: Key as ``base64:...`` or raw text (default: generate one)
            cipher: Cipher name (default: from EncryptionSettings)
            prune: Delete the plaintext afterwards
            force: Overwrite an existing encrypted file
            env: Environment name; rewrites path per env_style
            env_style: "suffix" or "directory" (default: from EncryptionSettings)

        Returns:
            Encrypted file path and the key in ``base64:`` form

        Raises:
            ConfigFileNotFoundError: If the plaintext doesn't exist
            EncryptionError: If encryption fails or the target exists without force
        """
        cipher_name = cipher or self.encryption.cipher
        source = self.env_path(path, env, env_style)
        if not source.is_file():
            raise ConfigFileNotFoundError(source)

        target = source.with_name(source.name + ENCRYPTED_SUFFIX)
        if target.exists() and not force:
            raise EncryptionError(source, "Encrypted file already exists. Use force=True to overwrite.")

        raw_key = parse_key(key) if key is not None else generate_key(cipher_name)
        contents = self._read_bytes(source)
        try:
            payload = self.cipher_factory(raw_key, cipher_name).encrypt(contents)
        except EncryptionError as e:
            raise EncryptionError(source, e.reason) from e

        self._write_bytes(target, payload)
        if prune:
            source.unlink()
        logger.info(f"Encrypted {source} to {target}")
        return EncryptionResult(target, format_key(raw_key))

    def decrypt(
        self,
        path: str | Path,
        key: str,
        force: bool = False,
        cipher: str | None = None,
        output_dir: str | Path | None = None,
        filename: str | None = None,
        env: str | None = None,
        prune: bool = False,
        env_style: EnvStyle | str | None = None,
    ) -> Path:
        """Decrypt an ``.encrypted`` file.

        Args:
            path: Encrypted file; with ``env``, the plaintext path it was
                encrypted from
            key: Key as ``base64:...`` or raw text
            force: Overwrite an existing output file
            cipher: Cipher name (default: from EncryptionSettings)
            output_dir: Output directory (default: the encrypted file's)
            filename: Output file name (default: name without ``.encrypted``)
            env: Environment name; rewrites path per env_style
            prune: Delete the encrypted file afterwards
            env_style: "suffix" or "directory"

        Returns:
            Path of the decrypted file

        Raises:
            ConfigFileNotFoundError: If the encrypted file doesn't exist
            DecryptionError: If the key is wrong, the payload is corrupt, or
                the output exists without force
            ConfigDirectoryNotFoundError: If the output directory doesn't exist
        """
        cipher_name = cipher or self.encryption.cipher
        source = Path(path)
        if env is not None:
            resolved = self.env_path(path, env, env_style)
            source = resolved.with_name(resolved.name + ENCRYPTED_SUFFIX)
        if not source.is_file():
            raise ConfigFileNotFoundError(source)

        target = _decrypted_path(source, output_dir, filename)
        if target.exists() and not force:
            raise DecryptionError(source, "Decrypted file already exists. Use force=True to overwrite.")

        payload = self._read_bytes(source)
        try:
            plaintext = self.cipher_factory(parse_key(key), cipher_name).decrypt(payload)
        except (EncryptionError, DecryptionError) as e:
            raise DecryptionError(source, e.reason) from e

        if not target.parent.is_dir():
            raise ConfigDirectoryNotFoundError(target.parent)

        self._write_bytes(target, plaintext)
        if prune:
            source.unlink()
        logger.info(f"Decrypted {source} to {target}")
        return target

    def env_path(self, path: str | Path, env: str | None, env_style: EnvStyle | str | None = None) -> Path:
        """Resolve the environment-specific variant of a path.

        SUFFIX: ``config/app.json`` -> ``config/app.production.json``.
        DIRECTORY: ``config/app.json`` -> ``config/production/app.json``, or
        ``config/<env_directory>/production/app.json`` when configured.
        """
        filepath = Path(path)
        if env is None:
            return filepath

        style = EnvStyle(env_style) if env_style is not None else self.encryption.env_style
        if style is EnvStyle.DIRECTORY:
            base = filepath.parent
            if self.encryption.env_directory is not None:
                base = base / self.encryption.env_directory
            return base / env / filepath.name

        return filepath.with_name(f"{filepath.stem}.{env}{filepath.suffix}")

    # ===== Private Helpers =====

    def _bind(self, module: str, result: SearchResult) -> None:
        self._results[module] = result
        self._working[module] = copy.deepcopy(result.config)

    def _ensure_loaded(self, module: str) -> bool:
        """Search for a module on first access; True if it has a working tree."""
        if module not in self._working:
            self.search(module)
        return module in self._working

    def _as_list(self, module: str, key: str) -> list[Any]:
        current = self.get(module, key)
        if current is None:
            return []
        return list(current) if isinstance(current, list) else [current]

    def _selected_searchers(self, module: str | None) -> list[Searcher]:
        if module is None:
            return list(self._searchers.values())
        return [self._searchers[module]] if module in self._searchers else []

    def _read(self, path: Path) -> Any:
        if not path.is_file():
            raise ConfigFileNotFoundError(path)
        return self.registry.for_path(path).load(path)

    def _read_bytes(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as e:
            raise ConfigFileError(f"Failed to read {path}: {e}") from e

    def _ensure_directory(self, target: Path) -> None:
        if not target.parent.is_dir():
            raise ReadOnlyConfigurationError(target)

    def _write(self, path: Path, text: str) -> None:
        """Write encoded configuration.

        Raises:
            ConfigFileError: If write fails
        """
        self._write_bytes(path, text.encode("utf-8"))

    def _write_bytes(self, path: Path, data: bytes) -> None:
        try:
            path.write_bytes(data)
        except OSError as e:
            raise ConfigFileError(f"Failed to write configuration to {path}: {e}") from e


def _kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, (dict, list)):
        return "array"
    return "scalar"


def _key_for(filepath: Path, key_pattern: str | re.Pattern | None) -> str:
    if key_pattern is not None:
        match = re.search(key_pattern, filepath.name)
        if match and match.groups():
            return match.group(1)
    return filepath.stem


def _decrypted_path(source: Path, output_dir: str | Path | None, filename: str | None) -> Path:
    if source.name.endswith(ENCRYPTED_SUFFIX):
        base = source.name[: -len(ENCRYPTED_SUFFIX)]
    else:
        base = source.name + ".decrypted"
    directory = Path(output_dir) if output_dir is not None else source.parent
    return directory / (filename or base)
