"""Configuration management for taskboard using YAML files."""

from pathlib import Path
from typing import Any, Callable

import structlog
import yaml

logger = structlog.get_logger()

CONFIG_DIR_NAME = ".taskboard"
CONFIG_FILE_NAME = "config.yaml"

BACKENDS = ("file", "http")

DEFAULTS: dict[str, Any] = {
    "backend": "file",
    "http.timeout": 10,
}


def _backend(value: str) -> str:
    if value not in BACKENDS:
        raise ValueError(f"Invalid backend {value!r}. Must be one of: {', '.join(BACKENDS)}")
    return value


def _timeout(value: str) -> float | int:
    try:
        seconds = float(value)
    except ValueError as e:
        raise ValueError(f"Invalid timeout {value!r}: expected a number of seconds") from e
    if seconds <= 0:
        raise ValueError("Timeout must be positive")
    return int(seconds) if seconds.is_integer() else seconds


def _text(value: str) -> str:
    if not value.strip():
        raise ValueError("Value must not be empty")
    return value.strip()


# Known keys and the parser applied to values given on the command line.
KEYS: dict[str, Callable[[str], Any]] = {
    "backend": _backend,
    "user": _text,
    "file.data_dir": _text,
    "http.base_url": _text,
    "http.session_token": _text,
    "http.timeout": _timeout,
}


def global_config_dir() -> Path:
    return Path.home() / CONFIG_DIR_NAME


class Config:
    """Configuration manager using YAML file storage.

    Local config lives in .taskboard/config.yaml in the current directory,
    global config in ~/.taskboard/config.yaml. Reads check local config first,
    then global config, then ``DEFAULTS``.

    Keys:
        backend: "file" or "http"
        user: Id of the acting user
        file.data_dir: Directory for the JSON collections (default: <config dir>/data)
        http.base_url: API root of a board server
        http.session_token: Session token for the board server
        http.timeout: Request timeout in seconds
    """

    def __init__(self, use_global: bool = False, config_dir: Path | None = None) -> None:
        """Initialize configuration manager.

        Args:
            use_global: If True, use global config only. If False, use local config with global fallback.
            config_dir: Custom directory to store config file (overrides use_global)
        """
        if config_dir is not None:
            self.config_dir = Path(config_dir)
        elif use_global:
            self.config_dir = global_config_dir()
        else:
            self.config_dir = Path.cwd() / CONFIG_DIR_NAME
        self.is_global = use_global

        self.config_file = self.config_dir / CONFIG_FILE_NAME
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self._config = self._load(self.config_file)

        self._global_config: dict[str, Any] = {}
        global_file = global_config_dir() / CONFIG_FILE_NAME
        if not self.is_global and global_file != self.config_file:
            try:
                self._global_config = self._load(global_file)
            except ValueError as e:
                # Local settings and defaults still apply.
                logger.warning("Ignoring global config", config_file=str(global_file), error=str(e))

        logger.debug("Config initialized", config_file=str(self.config_file), is_global=self.is_global)

    @staticmethod
    def _load(path: Path) -> dict[str, Any]:
        """Read one YAML config file; a missing file is an empty config.

        Raises:
            ValueError: The file cannot be read, is not YAML or is not a mapping
        """
        if not path.exists():
            return {}
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load config", config_file=str(path), error=str(e))
            raise ValueError(f"Failed to load config from {path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        logger.debug("Config loaded", config_file=str(path), keys=sorted(data))
        return data

    def _save(self) -> None:
        try:
            with open(self.config_file, "w") as f:
                yaml.safe_dump(self._config, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            logger.error("Failed to save config", config_file=str(self.config_file), error=str(e))
            raise ValueError(f"Failed to save config to {self.config_file}: {e}") from e
        logger.debug("Config saved", config_file=str(self.config_file))

    def source(self, key: str) -> str | None:
        """Where the effective value of ``key`` comes from.

        Returns:
            "local", "global" or "default", or None when the key is unset everywhere
        """
        if key in self._config:
            return "global" if self.is_global else "local"
        if key in self._global_config:
            return "global"
        if key in DEFAULTS:
            return "default"
        return None

    def get(self, key: str, default: Any = None) -> Any:
        """Get the effective value of a key.

        Args:
            key: Configuration key
            default: Returned when the key is unset and has no built-in default
        """
        origin = self.source(key)
        if origin is None:
            return default
        if origin == "default":
            return DEFAULTS[key]
        if key in self._config:
            return self._config[key]
        return self._global_config[key]

    def set(self, key: str, value: str) -> Any:
        """Validate and store a value given as text.

        Returns:
            The stored value after parsing (``http.timeout`` becomes a number)

        Raises:
            ValueError: Unknown key or invalid value
        """
        if key not in KEYS:
            raise ValueError(f"Unknown config key {key!r}. Known keys: {', '.join(KEYS)}")
        parsed = KEYS[key](value)
        logger.info("Setting config value", key=key, is_global=self.is_global)
        self._config[key] = parsed
        self._save()
        return parsed

    def unset(self, key: str) -> bool:
        """Remove a key from this config file. Returns False if it was not set here."""
        if key not in self._config:
            return False
        logger.info("Unsetting config value", key=key, is_global=self.is_global)
        del self._config[key]
        self._save()
        return True

    def list(self, include_defaults: bool = False) -> dict[str, Any]:
        """Effective settings, local over global, optionally over ``DEFAULTS``."""
        merged: dict[str, Any] = dict(DEFAULTS) if include_defaults else {}
        merged.update(self._global_config)
        merged.update(self._config)
        return merged

    def data_dir(self) -> Path:
        """Directory for the file backend's collections."""
        configured = self.get("file.data_dir")
        return Path(configured).expanduser() if configured else self.config_dir / "data"


def get_config(use_global: bool = False) -> Config:
    """Get a configuration instance.

    Args:
        use_global: If True, return global config. If False, return local config with global fallback.
    """
    return Config(use_global=use_global)
