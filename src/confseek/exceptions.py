"""Exceptions for confseek."""

from pathlib import Path


class ConfigError(Exception):
    """Base exception for configuration errors."""

    pass


class ConfigFileError(ConfigError):
    """Error reading or writing configuration file."""

    pass


class ConfigValidationError(ConfigError):
    """Error validating configuration data."""

    pass


# ===== Loading and Encoding =====


class LoaderError(ConfigFileError):
    """A codec failed to parse a configuration file."""

    def __init__(self, path: str | Path, reason: str, format_name: str | None = None):
        self.path = str(path)
        self.reason = reason
        self.format_name = format_name
        label = f"{format_name} file" if format_name else "file"
        super().__init__(f'Failed to parse {label} "{self.path}": {reason}')


class MissingPackagePropertyError(LoaderError):
    """package.json does not carry the property named after the module."""

    def __init__(self, path: str | Path, prop: str):
        self.prop = prop
        super().__init__(path, f'property "{prop}" not found')


class ConfigEncodingError(ConfigFileError):
    """A codec failed to serialize configuration data."""

    def __init__(self, format_name: str, reason: str):
        self.format_name = format_name
        self.reason = reason
        super().__init__(f"Failed to encode configuration as {format_name}: {reason}")


class ReadOnlyConfigurationError(ConfigFileError):
    """Target file or directory is not writable."""

    def __init__(self, path: str | Path):
        self.path = str(path)
        super().__init__(f'Configuration file "{self.path}" is not writable')


# ===== Validation =====


class InvalidConfigurationError(ConfigValidationError):
    """Malformed input to a composite operation."""

    pass


class InvalidModuleNameError(InvalidConfigurationError):
    """Module name is empty or contains characters outside [A-Za-z0-9_-]."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f'Invalid module name "{name}": only letters, digits, hyphens and underscores are allowed'
        )


# ===== Not Found =====


class ConfigNotFoundError(ConfigError):
    """Referenced file, directory or module does not exist."""

    pass


class ConfigFileNotFoundError(ConfigNotFoundError):
    """Configuration file does not exist or is not readable."""

    def __init__(self, path: str | Path):
        self.path = str(path)
        super().__init__(f'Configuration file "{self.path}" not found')


class ConfigDirectoryNotFoundError(ConfigNotFoundError):
    """Directory does not exist."""

    def __init__(self, path: str | Path):
        self.path = str(path)
        super().__init__(f'Directory "{self.path}" not found')


class ConfigModuleNotFoundError(ConfigNotFoundError):
    """No configuration could be found or loaded for a module."""

    def __init__(self, module: str, search_path: str | Path | None = None):
        self.module = module
        self.search_path = str(search_path) if search_path is not None else None
        message = f'No configuration found for "{module}"'
        if self.search_path:
            message += f' searching from "{self.search_path}"'
        super().__init__(message)


class ModuleNotLoadedError(ConfigNotFoundError):
    """Module has not been loaded and could not be resolved."""

    def __init__(self, module: str):
        self.module = module
        super().__init__(f'Module "{module}" is not loaded')


class UnsupportedExtensionError(ConfigError):
    """No codec is registered for an extension."""

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(f'Unsupported configuration file extension "{extension}"')


# ===== Typed Accessors =====


class TypedAccessorError(ConfigError, TypeError):
    """A typed accessor could not coerce a configuration value."""

    expected = "a value"

    def __init__(self, module: str, key: str, given: str):
        self.module = module
        self.key = key
        self.given = given
        super().__init__(f"Configuration value for [{module}.{key}] must be {self.expected}, {given} given.")


class InvalidStringValueError(TypedAccessorError):
    expected = "a string"


class InvalidIntegerValueError(TypedAccessorError):
    expected = "an integer"


class InvalidFloatValueError(TypedAccessorError):
    expected = "a float"


class InvalidBooleanValueError(TypedAccessorError):
    expected = "a boolean"


class InvalidArrayValueError(TypedAccessorError):
    expected = "an array"


# ===== Encryption =====


class EncryptionError(ConfigError):
    """Encrypting a configuration file failed."""

    def __init__(self, path: str | Path | None, reason: str):
        self.path = str(path) if path is not None else None
        self.reason = reason
        if self.path:
            super().__init__(f'Failed to encrypt "{self.path}": {reason}')
        else:
            super().__init__(f"Encryption failed: {reason}")


class InvalidKeyError(EncryptionError):
    """Encryption key is malformed."""

    def __init__(self, reason: str = "invalid base64 encoding"):
        super().__init__(None, f"Invalid encryption key: {reason}")


class DecryptionError(ConfigError):
    """Ciphertext could not be decrypted or the output would be clobbered."""

    def __init__(self, path: str | Path | None, reason: str):
        self.path = str(path) if path is not None else None
        self.reason = reason
        if self.path:
            super().__init__(f'Failed to decrypt "{self.path}": {reason}')
        else:
            super().__init__(f"Decryption failed: {reason}")

