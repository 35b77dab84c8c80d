"""Configuration management for the upscaler."""

import os
from pathlib import Path
from typing import Any, Dict, Optional
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from dotenv import load_dotenv

from .errors import ConfigurationError
from .logger import get_logger

logger = get_logger(__name__)

# Load environment variables
load_dotenv()

DEFAULT_CONFIG_PATH = Path("config/upscaler.yaml")


class Config(BaseModel):
    """Main application configuration."""

    model_config = ConfigDict(populate_by_name=True)

    # Collaborator credential; absence is reported per request, not at startup
    api_key: Optional[str] = Field(default=None, alias="API_KEY")

    # Collaborator
    image_model: str = Field(default="gemini-2.5-flash-image", alias="GEMINI_IMAGE_MODEL")
    base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        alias="GEMINI_BASE_URL",
    )
    timeout_seconds: float = Field(default=120.0, gt=0, alias="COLLABORATOR_TIMEOUT_SECONDS")

    # Application Settings
    app_env: str = Field(default="development", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key and self.api_key.strip())


# Global config instance
_config: Optional[Config] = None


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.debug(f"No config file at {path}, using environment only")
        return {}

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping at top level")
    return data


def load_config(path: Optional[Path] = None) -> Config:
    """
    Load configuration from YAML and environment.

    Environment variables override values from the YAML file.

    Args:
        path: YAML file to read (defaults to UPSCALER_CONFIG or config/upscaler.yaml)

    Returns:
        Config instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config

    if path is None:
        path = Path(os.getenv("UPSCALER_CONFIG", str(DEFAULT_CONFIG_PATH)))

    try:
        file_config = _read_yaml(Path(path))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse {path}: {e}") from e

    config_data = {
        **file_config,
        **os.environ,
    }

    try:
        _config = Config(**config_data)
    except ValidationError as e:
        raise ConfigurationError(f"Failed to load configuration: {e}") from e

    logger.info(
        "Configuration loaded successfully",
        extra={
            "environment": _config.app_env,
            "image_model": _config.image_model,
            "has_credential": _config.has_credential,
        }
    )

    return _config


def get_config() -> Config:
    """
    Get the current configuration instance.

    Raises:
        ConfigurationError: If config not loaded
    """
    if _config is None:
        raise ConfigurationError("Configuration not loaded. Call load_config() first.")
    return _config
