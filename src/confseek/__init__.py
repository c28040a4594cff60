"""confseek: Configuration discovery and management for named modules.

This library finds a module's configuration file by searching well-known
names in a directory (and optionally its parents), loads it with a codec
chosen by file extension, and lets applications read, modify and persist it.

Public API:
    ConfigManager: Per-module load/get/set/save, typed accessors, diff,
        merge, format conversion and file encryption
    Searcher: Finds and loads configuration for a single module
    SearchOptions, SearchResult, SearchStrategy: Search policy and results
    EncryptionSettings, EncryptionResult, EnvStyle: Encryption policy and results
    ConfigCollection: Convenience view over list/mapping values
    Codec, CodecRegistry, default_registry: File format plug-ins
    deep_merge, diff, interpolate: Tree utilities
    ConfigError and subclasses: Exception types

Example:
    ```python
    from confseek import ConfigManager, SearchOptions, SearchStrategy

    # Application injects search policy
    config = ConfigManager(SearchOptions(strategy=SearchStrategy.PROJECT))

    # Finds .myapprc, .myapprc.yaml, myapp.config.json, ... walking upward
    port = config.integer("myapp", "server.port")

    # Modify and persist
    config.set("myapp", "server.port", 8080).save("myapp")
    ```
"""

from .collection import ConfigCollection
from .exceptions import ConfigDirectoryNotFoundError
from .exceptions import ConfigEncodingError
from .exceptions import ConfigError
from .exceptions import ConfigFileError
from .exceptions import ConfigFileNotFoundError
from .exceptions import ConfigModuleNotFoundError
from .exceptions import ConfigNotFoundError
from .exceptions import ConfigValidationError
from .exceptions import DecryptionError
from .exceptions import EncryptionError
from .exceptions import InvalidArrayValueError
from .exceptions import InvalidBooleanValueError
from .exceptions import InvalidConfigurationError
from .exceptions import InvalidFloatValueError
from .exceptions import InvalidIntegerValueError
from .exceptions import InvalidKeyError
from .exceptions import InvalidModuleNameError
from .exceptions import InvalidStringValueError
from .exceptions import LoaderError
from .exceptions import MissingPackagePropertyError
from .exceptions import ModuleNotLoadedError
from .exceptions import ReadOnlyConfigurationError
from .exceptions import TypedAccessorError
from .exceptions import UnsupportedExtensionError
from .formats import Codec
from .formats import CodecRegistry
from .formats import default_registry
from .interpolation import interpolate
from .manager import ConfigManager
from .models import EncryptionResult
from .models import EncryptionSettings
from .models import EnvStyle
from .models import SearchOptions
from .models import SearchResult
from .models import SearchStrategy
from .searcher import Searcher
from .utils import deep_merge
from .utils import diff

__version__ = "0.1.0"

__all__ = [
    "ConfigManager",
    "Searcher",
    "SearchOptions",
    "SearchResult",
    "SearchStrategy",
    "EncryptionSettings",
    "EncryptionResult",
    "EnvStyle",
    "ConfigCollection",
    "Codec",
    "CodecRegistry",
    "default_registry",
    "deep_merge",
    "diff",
    "interpolate",
    "ConfigError",
    "ConfigFileError",
    "ConfigValidationError",
    "ConfigNotFoundError",
    "ConfigFileNotFoundError",
    "ConfigDirectoryNotFoundError",
    "ConfigModuleNotFoundError",
    "ModuleNotLoadedError",
    "LoaderError",
    "MissingPackagePropertyError",
    "ConfigEncodingError",
    "ReadOnlyConfigurationError",
    "InvalidConfigurationError",
    "InvalidModuleNameError",
    "UnsupportedExtensionError",
    "TypedAccessorError",
    "InvalidStringValueError",
    "InvalidIntegerValueError",
    "InvalidFloatValueError",
    "InvalidBooleanValueError",
    "InvalidArrayValueError",
    "EncryptionError",
    "InvalidKeyError",
    "DecryptionError",
]
