import os
import json
import logging


DEFAULT_SETTINGS = {
    "host": "127.0.0.1",
    "port": 19876,
    "connect_timeout": 1.0,
    "first_read_timeout": 0.1,
    "drain_timeout": 0.05,
    "read_chunk_size": 128 * 1024,
    "favicon_service_url": "https://www.google.com/s2/favicons?domain={host}&sz={size}",
    "favicon_size": 128,
    "favicon_fetch_timeout": 5.0,
    "cache_dir_name": "FaviconCache",
    "default_icon": "Images/icon.png",
}

# Settings that must be positive integers
_INTEGER_SETTINGS = ("port", "read_chunk_size", "favicon_size")

# Settings that must be positive numbers
_NUMBER_SETTINGS = (
    "connect_timeout",
    "first_read_timeout",
    "drain_timeout",
    "favicon_fetch_timeout",
)

_STRING_SETTINGS = ("host", "favicon_service_url", "cache_dir_name", "default_icon")


class ConfigManager:
    """Manages the client configuration stored in JSON format."""

    def __init__(self, config_path=None):
        """Initialize the configuration manager.

        Args:
            config_path (str, optional): Path to the config file. If None, uses default location.
        """
        self.logger = logging.getLogger("ShimTabs.Config")

        if config_path is None:
            # Default location is in the package directory
            self.config_path = os.path.join(
                os.path.dirname(os.path.abspath(__file__)), "shimtabs_config.json"
            )
        else:
            self.config_path = config_path

        self.config_dir = os.path.dirname(os.path.abspath(self.config_path))

        # Ensure the config directory exists
        if not os.path.exists(self.config_dir):
            os.makedirs(self.config_dir)

        # Load or create the config file
        if not os.path.exists(self.config_path):
            self.logger.info(
                f"Config file not found. Creating default at {self.config_path}"
            )
            self.config = self._create_default_config()
            self.save_config()
        else:
            self.load_config()

        if not hasattr(self, "_last_saved_json"):
            self._last_saved_json = json.dumps(self.config, sort_keys=True)

    def load_config(self):
        """Load configuration from the JSON file."""
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                self.config = json.load(f)

            # Snapshot for change detection in save_config.
            self._last_saved_json = json.dumps(self.config, sort_keys=True)

            if not self._validate_config():
                self.logger.warning("Invalid config file. Creating new default config.")
                self.config = self._create_default_config()
                self.save_config()

            return True
        except (OSError, ValueError) as e:
            self.logger.error(f"Error loading config: {str(e)}")
            self.config = self._create_default_config()
            return False

    def save_config(self):
        """Save configuration to the JSON file, overwriting without backups."""
        try:
            # If nothing changed, skip write
            if hasattr(self, "_last_saved_json"):
                current_json = json.dumps(self.config, sort_keys=True)
                if current_json == self._last_saved_json:
                    return True

            with open(self.config_path, "w", encoding="utf-8") as f:
                json.dump(self.config, f, indent=2)

            self._last_saved_json = json.dumps(self.config, sort_keys=True)
            self.logger.debug(f"Config saved to {self.config_path}")

            return True
        except OSError as e:
            self.logger.error(f"Error saving config: {str(e)}")
            return False

    def _create_default_config(self):
        """Create a default configuration structure."""
        return {"settings": dict(DEFAULT_SETTINGS)}

    def _validate_config(self):
        """Validate that the config has the required structure.

        Missing settings are filled from defaults, unknown keys are kept
        but ignored.
        """
        if not isinstance(self.config, dict):
            return False

        settings = self.config.get("settings")
        if settings is None:
            self.config["settings"] = dict(DEFAULT_SETTINGS)
            return True
        if not isinstance(settings, dict):
            return False

        for keys, types in (
            (_INTEGER_SETTINGS, (int,)),
            (_NUMBER_SETTINGS, (int, float)),
        ):
            for key in keys:
                if key not in settings:
                    continue
                value = settings[key]
                if isinstance(value, bool) or not isinstance(value, types):
                    return False
                if value <= 0:
                    return False

        for key in _STRING_SETTINGS:
            if key in settings and not isinstance(settings[key], str):
                return False

        for key, value in DEFAULT_SETTINGS.items():
            settings.setdefault(key, value)

        return True

    def get_settings(self):
        """Get all client settings.

        Returns:
            dict: Client settings
        """
        if "settings" not in self.config:
            self.config["settings"] = dict(DEFAULT_SETTINGS)
        return self.config["settings"]

    def update_settings(self, settings_dict):
        """Update client settings.

        Args:
            settings_dict (dict): Settings to update (partial or full)

        Returns:
            bool: True if successful
        """
        if "settings" not in self.config:
            self.config["settings"] = dict(DEFAULT_SETTINGS)

        self.config["settings"].update(settings_dict)
        self.save_config()
        self.logger.info(f"Settings updated: {settings_dict}")
        return True

    def get_setting(self, key, default=None):
        """Get a specific setting value.

        Args:
            key (str): Setting key
            default: Default value if key doesn't exist

        Returns:
            The setting value or default
        """
        settings = self.get_settings()
        return settings.get(key, default)
