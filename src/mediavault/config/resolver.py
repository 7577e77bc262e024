"""Merge configuration layers into a validated settings model."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import MediaVaultConfig

ENV_PREFIX = "MEDIAVAULT__"


def resolve_with_precedence(
    *,
    defaults: MediaVaultConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> MediaVaultConfig:
    """Layer overrides on top of defaults; later sources win.

    The order is defaults, then the YAML file, then environment variables, then
    CLI flags. Keys in any layer may be nested mappings or dotted paths such as
    ``"upload.enforce_extension"``.

    Raises:
        ConfigError: If a layer is malformed or the merged result fails validation.
    """
    merged: dict[str, Any] = defaults.model_dump(mode="python")
    layers = (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    )
    for label, layer in layers:
        if layer is None:
            continue
        merged = _deep_merge(merged, _expand_dotted(layer, label=label))

    try:
        return MediaVaultConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def flatten_for_env(config: MediaVaultConfig) -> dict[str, str]:
    """Render the config as ``MEDIAVAULT__SECTION__KEY`` environment assignments."""
    flat: dict[str, str] = {}

    def _walk(path: list[str], value: Any) -> None:
        if isinstance(value, dict) and value:
            for key, child in value.items():
                _walk(path + [str(key)], child)
            return
        name = ENV_PREFIX + "__".join(part.upper() for part in path)
        if isinstance(value, (dict, list)):
            flat[name] = yaml.safe_dump(value, default_flow_style=True).strip()
        elif value is None:
            flat[name] = "null"
        elif isinstance(value, bool):
            flat[name] = "true" if value else "false"
        else:
            flat[name] = str(value)

    for section, payload in config.model_dump(mode="python").items():
        _walk([section], payload)
    return flat


def overrides_from_env(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``MEDIAVAULT__SECTION__KEY`` variables into a nested override mapping.

    Values are parsed as YAML so ``true``, ``5`` and ``[.ch]`` arrive typed;
    text that is not valid YAML is kept verbatim.
    """
    overrides: dict[str, Any] = {}
    for name, raw in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        path = [part.lower() for part in name[len(ENV_PREFIX) :].split("__") if part]
        if not path:
            continue
        try:
            value: Any = yaml.safe_load(raw)
        except yaml.YAMLError:
            value = raw
        _place(overrides, path, value, label="environment")
    return overrides


def with_dotted_value(source: Mapping[str, Any], key: str, value: Any) -> dict[str, Any]:
    """Return a copy of ``source`` with ``value`` stored at the dotted ``key``.

    Raises:
        ConfigError: If ``key`` is empty or runs through a non-mapping value.
    """
    path = [segment.strip() for segment in key.split(".")]
    if not all(path):
        raise ConfigError(f"Invalid configuration key: {key!r}")
    updated = _deep_merge(source, {})
    node = updated
    for segment in path[:-1]:
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise ConfigError(f"Cannot set {key}: {segment} is not a section.")
        node = child
    node[path[-1]] = deepcopy(value)
    return updated


def _expand_dotted(source: Mapping[str, Any], *, label: str) -> dict[str, Any]:
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{label.capitalize()} overrides must be a mapping.")

    expanded: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{label.capitalize()} override keys must be strings.")
        _place(expanded, key.split("."), value, label=label)
    return expanded


def _place(target: dict[str, Any], path: list[str], value: Any, *, label: str) -> None:
    node = target
    for segment in path[:-1]:
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise ConfigError(
                f"{label.capitalize()} override for {'.'.join(path)} conflicts with existing value."
            )
        node = child
    leaf = path[-1]
    if isinstance(value, MappingABC):
        current = node.get(leaf)
        base = current if isinstance(current, dict) else {}
        node[leaf] = _deep_merge(base, _expand_dotted(value, label=label))
    else:
        node[leaf] = value


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = [
    "ENV_PREFIX",
    "flatten_for_env",
    "overrides_from_env",
    "resolve_with_precedence",
    "with_dotted_value",
]
