"""Global configuration data structures and loading.

Provides immutable global config data loaded from ~/.prstack/config.toml.
A missing file means every setting takes its default.
"""

import tomllib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

CONFIG_DIR_NAME = ".prstack"


@dataclass(frozen=True)
class GlobalConfig:
    """Immutable global configuration data.

    Loaded once at CLI entry point and stored in StackContext.
    """

    repository: str | None = None
    remote: str = "origin"
    trunk: str | None = None
    require_approval: bool = True
    use_unicode: bool = True


class ConfigStore(ABC):
    """Abstract interface for global config access.

    Enables in-memory implementations for tests without touching filesystem.
    """

    @abstractmethod
    def exists(self) -> bool:
        """Check if global config exists."""
        ...

    @abstractmethod
    def load(self) -> GlobalConfig:
        """Load global config.

        Raises:
            FileNotFoundError: If config doesn't exist
            ValueError: If a setting has the wrong type
        """
        ...

    @abstractmethod
    def path(self) -> Path:
        """Path to the config file (for error messages and debugging)."""
        ...

    def load_or_default(self) -> GlobalConfig:
        if not self.exists():
            return GlobalConfig()
        return self.load()


def _typed(data: dict[str, Any], key: str, expected: type, default: Any, path: Path) -> Any:
    if key not in data:
        return default
    value = data[key]
    if not isinstance(value, expected):
        raise ValueError(
            f"Invalid '{key}' in {path}: expected {expected.__name__}, "
            f"got {type(value).__name__}"
        )
    return value


def parse_global_config(data: dict[str, Any], path: Path) -> GlobalConfig:
    defaults = GlobalConfig()
    return GlobalConfig(
        repository=_typed(data, "repository", str, defaults.repository, path),
        remote=_typed(data, "remote", str, defaults.remote, path),
        trunk=_typed(data, "trunk", str, defaults.trunk, path),
        require_approval=_typed(data, "require_approval", bool, defaults.require_approval, path),
        use_unicode=_typed(data, "use_unicode", bool, defaults.use_unicode, path),
    )


class FilesystemConfigStore(ConfigStore):
    """Production implementation that reads ~/.prstack/config.toml."""

    def __init__(self, home: Path | None = None) -> None:
        self._home = home

    def exists(self) -> bool:
        return self.path().exists()

    def load(self) -> GlobalConfig:
        config_path = self.path()
        if not config_path.exists():
            raise FileNotFoundError(f"Global config not found at {config_path}")

        try:
            data = tomllib.loads(config_path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Malformed config at {config_path}: {e}") from e
        return parse_global_config(data, config_path)

    def path(self) -> Path:
        home = self._home if self._home is not None else Path.home()
        return home / CONFIG_DIR_NAME / "config.toml"


class InMemoryConfigStore(ConfigStore):
    """Test implementation that stores config in memory without touching filesystem."""

    def __init__(self, config: GlobalConfig | None = None) -> None:
        """Initialize in-memory config store.

        Args:
            config: Initial config state (None = config doesn't exist)
        """
        self._config = config

    def exists(self) -> bool:
        return self._config is not None

    def load(self) -> GlobalConfig:
        if self._config is None:
            raise FileNotFoundError(f"Global config not found at {self.path()}")
        return self._config

    def path(self) -> Path:
        return Path("/fake/prstack/config.toml")
