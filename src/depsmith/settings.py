"""User-level settings and shared directory locations.

Settings live in ``<home>/settings.yaml`` where ``<home>`` is
``$DEPSMITH_HOME`` or ``~/.depsmith``. Every key is optional::

    use_git_cache: true        # false = throw-away clones per install
    max_nested_depth: 3        # nested project recursion limit
    http_timeout: 30           # seconds, for downloads
    extension_catalog: ~/my-extensions.yaml

The shared cache root defaults to ``<home>/cache`` and can be moved with
``$DEPSMITH_CACHE_DIR`` (or the ``--cache-dir`` CLI flag, which wins).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from depsmith.exceptions import ConfigError

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "DEPSMITH_HOME"
CACHE_ENV_VAR = "DEPSMITH_CACHE_DIR"
SETTINGS_FILENAME = "settings.yaml"

DEFAULT_MAX_NESTED_DEPTH = 3
DEFAULT_HTTP_TIMEOUT = 30.0


def resolve_home(home: Path | None = None) -> Path:
    """Return the depsmith home directory (not created)."""
    if home is not None:
        return home
    env_home = os.environ.get(HOME_ENV_VAR)
    if env_home:
        return Path(env_home).expanduser()
    return Path.home() / ".depsmith"


@dataclass
class Settings:
    """Runtime configuration shared by one install run.

    Attributes:
        home: depsmith home directory.
        cache_root: Shared cache root holding ``git-cache/`` and
            ``downloads/``.
        use_git_cache: Reuse persistent clones. When False every git install
            uses a throw-away clone.
        max_nested_depth: Maximum recursion depth for nested projects.
        http_timeout: Timeout in seconds for HTTP downloads.
        extension_catalog: Optional user catalog merged over the bundled
            extension catalog.
    """

    home: Path
    cache_root: Path
    use_git_cache: bool = True
    max_nested_depth: int = DEFAULT_MAX_NESTED_DEPTH
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    extension_catalog: Path | None = None

    @property
    def git_cache_dir(self) -> Path:
        return self.cache_root / "git-cache"

    @classmethod
    def load(
        cls,
        home: Path | None = None,
        cache_root: Path | None = None,
    ) -> Settings:
        """Load settings from ``<home>/settings.yaml``.

        Args:
            home: Explicit home directory; defaults to ``resolve_home()``.
            cache_root: Explicit cache root; overrides the environment
                variable and the default.

        Raises:
            ConfigError: If the settings file is not valid YAML or holds
                values of the wrong type.
        """
        home = resolve_home(home)
        if cache_root is None:
            env_cache = os.environ.get(CACHE_ENV_VAR)
            cache_root = Path(env_cache).expanduser() if env_cache else home / "cache"

        settings = cls(home=home, cache_root=cache_root)
        data = _read_settings_file(home / SETTINGS_FILENAME)
        settings._apply(data)
        return settings

    def _apply(self, data: dict[str, Any]) -> None:
        try:
            if "use_git_cache" in data:
                self.use_git_cache = bool(data["use_git_cache"])
            if "max_nested_depth" in data:
                self.max_nested_depth = int(data["max_nested_depth"])
            if "http_timeout" in data:
                self.http_timeout = float(data["http_timeout"])
            if data.get("extension_catalog"):
                self.extension_catalog = Path(str(data["extension_catalog"])).expanduser()
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid value in {SETTINGS_FILENAME}: {exc}") from exc
        if self.max_nested_depth < 0:
            raise ConfigError("max_nested_depth must be >= 0")


def _read_settings_file(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Could not read {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")
    logger.debug("Loaded settings from %s", path)
    return data
