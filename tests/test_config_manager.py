"""Tests for the JSON configuration manager."""

import json

import pytest

from shimtabs.config_manager import DEFAULT_SETTINGS, ConfigManager


class TestConfigManager:
    def test_creates_default_file(self, tmp_path):
        path = tmp_path / "conf" / "shimtabs_config.json"
        manager = ConfigManager(str(path))

        assert path.exists()
        assert manager.get_settings() == DEFAULT_SETTINGS
        assert json.loads(path.read_text())["settings"]["port"] == 19876

    def test_partial_file_filled_from_defaults(self, tmp_path):
        path = tmp_path / "shimtabs_config.json"
        path.write_text(json.dumps({"settings": {"port": 5000, "drain_timeout": 0.2}}))

        settings = ConfigManager(str(path)).get_settings()

        assert settings["port"] == 5000
        assert settings["drain_timeout"] == 0.2
        assert settings["host"] == "127.0.0.1"

    def test_invalid_values_reset_to_defaults(self, tmp_path):
        path = tmp_path / "shimtabs_config.json"
        path.write_text(json.dumps({"settings": {"first_read_timeout": -1}}))

        manager = ConfigManager(str(path))

        assert manager.get_settings() == DEFAULT_SETTINGS
        assert json.loads(path.read_text())["settings"]["first_read_timeout"] == 0.1

    def test_unparseable_file_uses_defaults(self, tmp_path):
        path = tmp_path / "shimtabs_config.json"
        path.write_text("{not json")

        manager = ConfigManager(str(path))

        assert manager.get_setting("port") == 19876

    def test_update_settings_persists(self, tmp_path):
        path = tmp_path / "shimtabs_config.json"
        ConfigManager(str(path)).update_settings({"port": 4242})

        assert ConfigManager(str(path)).get_setting("port") == 4242

    def test_get_setting_default(self, tmp_path):
        manager = ConfigManager(str(tmp_path / "c.json"))
        assert manager.get_setting("nope", "fallback") == "fallback"

    @pytest.mark.parametrize(
        "settings",
        [
            {"port": 1.5},
            {"read_chunk_size": 1.5},
            {"favicon_size": 64.0},
            {"port": "19876"},
            {"connect_timeout": True},
            {"host": 127},
            {"favicon_service_url": None},
            {"cache_dir_name": ["FaviconCache"]},
            {"default_icon": 1},
        ],
    )
    def test_wrongly_typed_values_reset_to_defaults(self, tmp_path, settings):
        path = tmp_path / "shimtabs_config.json"
        path.write_text(json.dumps({"settings": settings}))

        assert ConfigManager(str(path)).get_settings() == DEFAULT_SETTINGS

    def test_integer_timeouts_accepted(self, tmp_path):
        path = tmp_path / "shimtabs_config.json"
        path.write_text(json.dumps({"settings": {"connect_timeout": 2}}))

        assert ConfigManager(str(path)).get_setting("connect_timeout") == 2
