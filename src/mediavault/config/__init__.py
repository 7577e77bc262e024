"""Configuration management for mediavault.

Settings are layered defaults < ``~/.mediavault/config.yaml`` < ``MEDIAVAULT__``
environment variables < command-line overrides. Only the file layer is ever
written back.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import DEFAULT_EXTENSION_ALIASES, MediaVaultConfig
from .resolver import (
    ENV_PREFIX,
    flatten_for_env,
    overrides_from_env,
    resolve_with_precedence,
    with_dotted_value,
)

DEFAULT_CONFIG_PATH = Path("~/.mediavault/config.yaml")
_HEADER_LINES = (
    "# mediavault configuration file",
    "# Edit with `mediavault config set KEY --value VALUE`; "
    f"{ENV_PREFIX}SECTION__KEY variables override it.",
)


class ConfigManager:
    """Owns the YAML configuration file and resolves the effective settings."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = os.environ if env is None else env

    @property
    def config_path(self) -> Path:
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> MediaVaultConfig:
        """Return the effective configuration.

        Args:
            cli_overrides: Dotted-key overrides supplied on the command line.
            include_env: Whether ``MEDIAVAULT__`` environment variables apply.
            ensure_file: Create the configuration file with defaults when missing.
            env_overrides: Environment mapping to use instead of the one given
                at construction.

        Returns:
            MediaVaultConfig: Validated configuration model.

        Raises:
            ConfigError: If the file or any override layer is invalid.
        """
        if ensure_file:
            self.ensure_exists()

        env_layer = None
        if include_env:
            env_layer = overrides_from_env(self._env if env_overrides is None else env_overrides)

        return resolve_with_precedence(
            defaults=MediaVaultConfig(),
            file_overrides=self._read_mapping(),
            env_overrides=env_layer or None,
            cli_overrides=cli_overrides,
        )

    def ensure_exists(self) -> Path:
        """Write the default configuration unless a file is already present."""
        if not self._config_path.exists():
            self.save(MediaVaultConfig())
        return self._config_path

    def save(self, config: MediaVaultConfig | Mapping[str, Any]) -> str:
        """Write ``config`` to the file and return the text written."""
        if isinstance(config, MediaVaultConfig):
            data: Mapping[str, Any] = config.model_dump(mode="python")
        else:
            data = config
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        text = "\n".join((*_HEADER_LINES, f"# Last updated: {stamp}", ""))
        text += yaml.safe_dump(dict(data), sort_keys=False)

        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        self._config_path.write_text(text, encoding="utf-8")
        return text

    def set_value(self, key: str, value: Any) -> tuple[str, str] | None:
        """Store ``value`` at the dotted ``key`` of the file layer.

        The updated file must still validate on its own; environment and CLI
        layers play no part.

        Args:
            key: Dotted path such as ``upload.max_file_size_mb``.
            value: Already-parsed value to store.

        Returns:
            tuple[str, str] | None: File text before and after the write, or
            ``None`` when the file already held ``value``.

        Raises:
            ConfigError: If the key is malformed or the result is invalid.
        """
        self.ensure_exists()
        current = self._read_mapping()
        updated = with_dotted_value(current, key, value)
        if updated == current:
            return None

        resolve_with_precedence(defaults=MediaVaultConfig(), file_overrides=updated)
        before = self._config_path.read_text(encoding="utf-8")
        return before, self.save(updated)

    def _read_mapping(self) -> dict[str, Any]:
        try:
            text = self._config_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}

        try:
            raw = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {self._config_path}: {exc}") from exc

        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ConfigError(f"{self._config_path} must contain a mapping at the top level.")
        return raw


__all__ = [
    "ConfigError",
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_EXTENSION_ALIASES",
    "MediaVaultConfig",
    "flatten_for_env",
    "overrides_from_env",
    "resolve_with_precedence",
]
