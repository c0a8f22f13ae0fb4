from __future__ import annotations

import pytest

from callback_bridge.config import BridgeSettings, load_settings


def test_load_settings_from_env_path(tmp_path, monkeypatch):
    config = tmp_path / "bridge.toml"
    config.write_text(
        '[bridge]\ncatalog = "catalogs/host.yaml"\nlog_level = "DEBUG"\nskip_namespaces = ["debugger", "downloads"]\n',
        encoding="utf-8",
    )
    monkeypatch.setenv("CALLBACK_BRIDGE_CONFIG", str(config))

    settings = load_settings()

    assert settings.source_path == config
    assert settings.catalog_path == tmp_path / "catalogs" / "host.yaml"
    assert settings.log_level == "DEBUG"
    assert settings.skip_namespaces == ("debugger", "downloads")


def test_load_settings_from_working_directory(tmp_path):
    settings_dir = tmp_path / ".callback_bridge"
    settings_dir.mkdir()
    (settings_dir / "config.toml").write_text('[bridge]\nskip_namespaces = "identity"\n', encoding="utf-8")

    settings = load_settings(strict=True)

    assert settings.skip_namespaces == ("identity",)
    assert settings.catalog_path is None


def test_missing_settings_fall_back_to_defaults():
    assert load_settings() == BridgeSettings()


def test_missing_settings_strict_raises():
    with pytest.raises(FileNotFoundError):
        load_settings(strict=True)


def test_invalid_toml_raises(tmp_path, monkeypatch):
    config = tmp_path / "broken.toml"
    config.write_text("[bridge\n", encoding="utf-8")
    monkeypatch.setenv("CALLBACK_BRIDGE_CONFIG", str(config))

    with pytest.raises(ValueError, match="Failed to parse"):
        load_settings()


def test_invalid_skip_namespaces_type_raises(tmp_path, monkeypatch):
    config = tmp_path / "bridge.toml"
    config.write_text("[bridge]\nskip_namespaces = 3\n", encoding="utf-8")
    monkeypatch.setenv("CALLBACK_BRIDGE_CONFIG", str(config))

    with pytest.raises(ValueError, match="skip_namespaces"):
        load_settings()
