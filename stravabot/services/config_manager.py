import os
import yaml
from pathlib import Path
from string import Template
from typing import Any, Dict, Optional
from dotenv import load_dotenv
import structlog
from pydantic import ValidationError

from stravabot.models.config import BotConfig

logger = structlog.get_logger()

# Environment variable -> key in the "strava" config section
REQUIRED_ENV_VARS = {
    "STRAVA_CLIENT_ID": "client_id",
    "STRAVA_CLIENT_SECRET": "client_secret",
    "STRAVA_INITIAL_REFRESH_TOKEN": "refresh_token",
}


class ConfigValidationError(Exception):
    """Configuration validation failed"""

    pass


class ConfigManager:
    """Loads bot configuration from an optional YAML file and the environment"""

    def __init__(
        self,
        config_path: str = "config/stravabot.yaml",
        load_env_file: bool = True,
    ):
        self.config_path = Path(config_path)
        self.env_loaded = not load_env_file
        self._config: Optional[BotConfig] = None

    def load_config(self) -> BotConfig:
        """Load and validate configuration"""
        if self._config:
            return self._config

        # 1. Load environment
        if not self.env_loaded:
            load_dotenv()
            self.env_loaded = True

        # 2. Read optional YAML
        config_data = self._read_yaml() if self.config_path.exists() else {}

        # 3. Fill credentials from the environment
        strava_section = config_data.get("strava") or {}
        missing = []
        for env_var, key in REQUIRED_ENV_VARS.items():
            current = strava_section.get(key)
            if current and not _is_unresolved(current):
                continue
            value = os.environ.get(env_var)
            if value:
                strava_section[key] = value
            else:
                missing.append(env_var)

        if missing:
            raise ConfigValidationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )
        config_data["strava"] = strava_section

        # 4. Validate with Pydantic
        try:
            self._config = BotConfig(**config_data)
        except ValidationError as e:
            raise ConfigValidationError(f"Invalid configuration: {e}")

        logger.info(
            "config_loaded",
            config_file=str(self.config_path) if self.config_path.exists() else None,
            schedule_minute=self._config.settings.schedule_minute,
            page_size=self._config.settings.page_size,
        )
        return self._config

    def _read_yaml(self) -> Dict[str, Any]:
        try:
            with open(self.config_path) as f:
                raw_content = f.read()
        except OSError as e:
            raise ConfigValidationError(f"Failed to read config file: {e}")

        try:
            # safe_substitute leaves unknown ${VAR} references untouched
            template = Template(raw_content)
            substituted_content = template.safe_substitute(os.environ)
            config_data = yaml.safe_load(substituted_content)
        except (yaml.YAMLError, ValueError) as e:
            raise ConfigValidationError(
                f"Failed to parse YAML or substitute variables: {e}"
            )

        if config_data is None:
            return {}
        if not isinstance(config_data, dict):
            raise ConfigValidationError("Config file must contain a mapping")
        return config_data


def _is_unresolved(value: Any) -> bool:
    """A ${VAR} reference left behind because VAR was not set"""
    return isinstance(value, str) and value.startswith("${") and value.endswith("}")
