"""Unit tests for configuration management."""

from pathlib import Path

import pytest
import yaml

from mediavault.config import (
    ConfigError,
    ConfigManager,
    MediaVaultConfig,
    flatten_for_env,
    overrides_from_env,
    resolve_with_precedence,
)
from mediavault.config.resolver import with_dotted_value


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager()


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path == tmp_path / ".mediavault" / "config.yaml"
    assert path.exists()
    text = path.read_text(encoding="utf-8")
    assert "mediavault configuration file" in text
    assert "Last updated:" in text

    config = manager.load(include_env=False)
    assert isinstance(config, MediaVaultConfig)
    assert config == MediaVaultConfig()


def test_resolve_with_precedence_respects_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.save(
        {"urls": {"public_prefix": "files.example.org"}, "upload": {"max_file_size_mb": 64}}
    )

    env = {
        "MEDIAVAULT__UPLOAD__MAX_FILE_SIZE_MB": "32",
        "MEDIAVAULT__UPLOAD__ENFORCE_EXTENSION": "false",
    }
    cli = {"upload.max_file_size_mb": 8}

    config = manager.load(cli_overrides=cli, env_overrides=env)

    assert config.urls.public_prefix == "files.example.org"
    assert config.upload.enforce_extension is False
    # CLI overrides take precedence over environment
    assert config.upload.max_file_size_mb == 8


def test_environment_variables_are_read_from_injected_mapping(tmp_path: Path) -> None:
    manager = ConfigManager(
        tmp_path / "config.yaml",
        env={
            "MEDIAVAULT__URLS__TLD_WHITELIST": "['.ch', '.org']",
            "MEDIAVAULT__UPLOAD__EXTENSION_ALIASES__JPE": "jpg",
            "UNRELATED": "ignored",
        },
    )

    config = manager.load()

    assert config.urls.tld_whitelist == [".ch", ".org"]
    assert config.upload.extension_aliases["jpe"] == "jpg"
    assert config.upload.extension_aliases["jpeg"] == "jpg"
    assert manager.load(include_env=False).urls.tld_whitelist is None


def test_load_without_ensure_file_leaves_disk_untouched(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "nested" / "config.yaml", env={})

    assert manager.load(ensure_file=False) == MediaVaultConfig()
    assert not manager.config_path.exists()
    assert not manager.config_path.parent.exists()


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()

    manager.config_path.write_text("upload: [unclosed", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


def test_unknown_keys_are_rejected(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "config.yaml", env={})
    manager.save({"upload": {"enforce_extensions": False}})

    with pytest.raises(ConfigError):
        manager.load()


def test_save_round_trips_model(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "config.yaml", env={})
    config = MediaVaultConfig.model_validate({"urls": {"tld_whitelist": [".ch"]}})

    manager.save(config)

    assert yaml.safe_load(manager.config_path.read_text())["urls"]["tld_whitelist"] == [".ch"]
    assert manager.load() == config


def test_flatten_for_env_round_trips_defaults() -> None:
    flat = flatten_for_env(MediaVaultConfig())

    assert flat["MEDIAVAULT__UPLOAD__ENFORCE_EXTENSION"] == "true"
    assert flat["MEDIAVAULT__UPLOAD__MAX_FILE_SIZE_MB"] == "0"
    assert flat["MEDIAVAULT__UPLOAD__EXTENSION_ALIASES__JPEG"] == "jpg"
    assert flat["MEDIAVAULT__URLS__TLD_WHITELIST"] == "null"
    assert flat["MEDIAVAULT__URLS__PUBLIC_PREFIX"] == "sec.upload"


def test_flattened_environment_resolves_to_same_config(tmp_path: Path) -> None:
    config = MediaVaultConfig.model_validate(
        {"urls": {"tld_whitelist": [".ch", ".org"]}, "upload": {"max_file_size_mb": 5}}
    )
    manager = ConfigManager(tmp_path / "config.yaml", env=flatten_for_env(config))

    assert manager.load(ensure_file=False) == config


def test_resolve_with_precedence_invalid_value_raises() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=MediaVaultConfig(),
            file_overrides={"upload": {"max_file_size_mb": "not-an-int"}},
        )

    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=MediaVaultConfig(),
            cli_overrides={"upload.max_file_size_mb": -1},
        )


def test_dotted_override_conflicting_with_scalar_raises() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=MediaVaultConfig(),
            cli_overrides={"urls.public_prefix": "a", "urls.public_prefix.host": "b"},
        )


def test_overrides_from_env_parses_prefixed_variables() -> None:
    overrides = overrides_from_env(
        {
            "MEDIAVAULT__UPLOAD__MAX_FILE_SIZE_MB": "5",
            "MEDIAVAULT__URLS__TLD_WHITELIST": "[.ch]",
            "MEDIAVAULT__URLS__PUBLIC_PREFIX": "cdn: [broken",
            "MEDIAVAULT__": "ignored",
            "OTHER__UPLOAD__ENFORCE_EXTENSION": "false",
        }
    )

    assert overrides == {
        "upload": {"max_file_size_mb": 5},
        "urls": {"tld_whitelist": [".ch"], "public_prefix": "cdn: [broken"},
    }


def test_with_dotted_value_replaces_without_mutating_source() -> None:
    source = {"upload": {"extension_aliases": {"jpeg": "jpg"}, "enforce_extension": True}}

    updated = with_dotted_value(source, " upload . extension_aliases ", {"tif": "tiff"})

    assert updated["upload"]["extension_aliases"] == {"tif": "tiff"}
    assert updated["upload"]["enforce_extension"] is True
    assert source["upload"]["extension_aliases"] == {"jpeg": "jpg"}
    assert with_dotted_value({}, "urls.public_prefix", "x") == {"urls": {"public_prefix": "x"}}


@pytest.mark.parametrize("key", ["", "upload.", ".upload", "upload..max_file_size_mb"])
def test_with_dotted_value_rejects_empty_segments(key: str) -> None:
    with pytest.raises(ConfigError, match="Invalid configuration key"):
        with_dotted_value({}, key, 1)


def test_with_dotted_value_rejects_paths_through_scalars() -> None:
    with pytest.raises(ConfigError, match="not a section"):
        with_dotted_value({"urls": {"public_prefix": "a"}}, "urls.public_prefix.host", "b")


def test_set_value_writes_file_and_returns_both_versions(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "config.yaml", env={})

    change = manager.set_value("upload.max_file_size_mb", 25)

    assert change is not None
    before, after = change
    assert "max_file_size_mb: 0" in before
    assert "max_file_size_mb: 25" in after
    assert manager.config_path.read_text(encoding="utf-8") == after
    assert manager.load().upload.max_file_size_mb == 25


def test_set_value_reports_unchanged_value(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "config.yaml", env={})
    manager.ensure_exists()
    original = manager.config_path.read_text(encoding="utf-8")

    assert manager.set_value("upload.enforce_extension", True) is None
    assert manager.config_path.read_text(encoding="utf-8") == original


def test_set_value_ignores_environment_layer(tmp_path: Path) -> None:
    manager = ConfigManager(
        tmp_path / "config.yaml", env={"MEDIAVAULT__UPLOAD__MAX_FILE_SIZE_MB": "-1"}
    )

    assert manager.set_value("urls.public_prefix", "cdn.example.org") is not None
    assert manager.load(include_env=False).urls.public_prefix == "cdn.example.org"


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("upload.max_file_size_mb", -3),
        ("upload.colour", "red"),
        ("urls.public_prefix.host", "cdn"),
        ("", 1),
    ],
)
def test_set_value_leaves_file_untouched_on_error(tmp_path: Path, key: str, value: object) -> None:
    manager = ConfigManager(tmp_path / "config.yaml", env={})
    manager.ensure_exists()
    original = manager.config_path.read_text(encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.set_value(key, value)

    assert manager.config_path.read_text(encoding="utf-8") == original
