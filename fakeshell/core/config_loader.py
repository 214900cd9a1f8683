"""
FakeShell Configuration Loader

Configuration management for shell sessions:
- JSON configuration file loading
- Default value handling
- Runtime configuration updates
- Type-safe access to configuration values

Author: YSNRFD
Version: 1.0.0
"""

import json
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Optional
import threading

from fakeshell.exceptions import ConfigurationError
from fakeshell.logger import get_logger


@dataclass
class ShellConfig:
    """Session and prompt settings."""
    user: str = "guest"
    hostname: str = "midrai"
    home: str = "/home/guest"
    path: str = "/usr/local/bin:/usr/bin:/bin"
    initial_path: Optional[str] = None
    welcome_message: str = (
        "Welcome to Midrai Terminal v1.0\n"
        "Type \"help\" to see available commands."
    )
    prompt_format: Optional[str] = None
    history_size: int = 1000


@dataclass
class FilesystemConfig:
    """Virtual filesystem settings."""
    populate_defaults: bool = True
    hostname_file: bool = True
    motd: str = "Welcome to Midrai Terminal!\n"


@dataclass
class LoggingConfig:
    """Logging configuration settings."""
    level: str = "WARNING"
    log_file: Optional[str] = None
    console_output: bool = True
    use_colors: bool = True


@dataclass
class Config:
    """
    Main configuration container.

    Holds all configuration settings for a shell session.
    """
    shell: ShellConfig = field(default_factory=ShellConfig)
    filesystem: FilesystemConfig = field(default_factory=FilesystemConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigLoader:
    """
    Configuration loader and manager.

    Example:
        >>> loader = ConfigLoader()
        >>> config = loader.load('fakeshell.json')
        >>> print(config.shell.hostname)
        midrai
    """

    _instance: Optional['ConfigLoader'] = None
    _lock = threading.Lock()

    def __new__(cls) -> 'ConfigLoader':
        """Singleton pattern for configuration access."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._config = Config()
                cls._instance._loaded = False
            return cls._instance

    def load(self, config_path: str) -> Config:
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Config object with loaded settings

        Raises:
            ConfigurationError: If the file cannot be loaded or parsed
        """
        path = Path(config_path)

        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in configuration file: {e}")
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError("Configuration root must be a JSON object")

        self._config = self._parse_config(data)
        self._loaded = True

        get_logger('config').info(
            "Configuration loaded",
            context={'path': str(path)}
        )
        return self._config

    def load_dict(self, data: dict[str, Any]) -> Config:
        """Load configuration from an already-parsed mapping."""
        self._config = self._parse_config(data)
        self._loaded = True
        return self._config

    def _parse_config(self, data: dict[str, Any]) -> Config:
        """Parse configuration data into Config object."""
        config = Config()

        for section in fields(Config):
            section_data = data.get(section.name)
            if section_data is None:
                continue
            if not isinstance(section_data, dict):
                raise ConfigurationError(
                    f"Section '{section.name}' must be an object",
                    key=section.name
                )

            current = getattr(config, section.name)
            known = {f.name for f in fields(current)}
            unknown = set(section_data) - known
            if unknown:
                raise ConfigurationError(
                    f"Unknown keys in section '{section.name}': {', '.join(sorted(unknown))}",
                    key=section.name
                )

            values = {name: getattr(current, name) for name in known}
            values.update(section_data)
            setattr(config, section.name, type(current)(**values))

        return config

    @property
    def config(self) -> Config:
        """Get the current configuration."""
        if not self._loaded:
            return Config()
        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by dot-notation key.

        Args:
            key: Dot-notation key (e.g., 'shell.hostname')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        parts = key.split('.')
        obj: Any = self.config

        for part in parts:
            if hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                return default

        return obj

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value at runtime.

        Args:
            key: Dot-notation key (e.g., 'shell.history_size')
            value: Value to set

        Note:
            This modifies configuration at runtime but does not
            persist changes to disk.
        """
        parts = key.split('.')
        self._loaded = True
        obj: Any = self._config

        for part in parts[:-1]:
            if hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                raise ConfigurationError(f"Invalid configuration key: {key}", key=key)

        final_key = parts[-1]
        if is_dataclass(obj) and hasattr(obj, final_key):
            setattr(obj, final_key, value)
        else:
            raise ConfigurationError(f"Invalid configuration key: {key}", key=key)

    def reload(self, config_path: str) -> Config:
        """Reload configuration from file."""
        return self.load(config_path)

    def reset(self) -> None:
        """Drop any loaded configuration and return to defaults."""
        self._config = Config()
        self._loaded = False

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        def dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, '__dataclass_fields__'):
                return {
                    k: dataclass_to_dict(v)
                    for k, v in obj.__dict__.items()
                }
            elif isinstance(obj, list):
                return [dataclass_to_dict(item) for item in obj]
            elif isinstance(obj, dict):
                return {k: dataclass_to_dict(v) for k, v in obj.items()}
            else:
                return obj

        return dataclass_to_dict(self.config)


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        Config object with current settings
    """
    loader = ConfigLoader()
    return loader.config
