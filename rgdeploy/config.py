"""Settings loading: optional YAML config file overlaid by environment variables."""

import logging
import os
from dataclasses import dataclass, fields

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.rgdeploy.yaml"
DEFAULT_API_URL = "https://management.azure.com"
DEFAULT_GALLERY_URL = "https://gallery.azure.com"

# Environment variables override values from the config file.
_ENV_OVERRIDES = {
    "subscription_id": "AZURE_SUBSCRIPTION_ID",
    "access_token": "AZURE_ACCESS_TOKEN",
    "api_url": "RGDEPLOY_API_URL",
    "gallery_url": "RGDEPLOY_GALLERY_URL",
}


@dataclass
class Settings:
    """Connection settings for the Resource Manager and gallery endpoints."""

    subscription_id: str = ""
    access_token: str = ""
    api_url: str = DEFAULT_API_URL
    gallery_url: str = DEFAULT_GALLERY_URL
    api_version: str = "2021-04-01"
    gallery_api_version: str = "2015-10-01"
    poll_interval: float = 10.0
    timeout: float = 3600.0

    @classmethod
    def from_dict(cls, d: dict) -> "Settings":
        """Build Settings from a config dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - known)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")
        return cls(**{k: v for k, v in d.items() if k in known})

    def require_credentials(self):
        """Raise ValueError if subscription or token are missing."""
        missing = []
        if not self.subscription_id:
            missing.append("subscription_id ($AZURE_SUBSCRIPTION_ID)")
        if not self.access_token:
            missing.append("access_token ($AZURE_ACCESS_TOKEN)")
        if missing:
            raise ValueError(f"Missing settings: {', '.join(missing)}")


def _expand_path(path: str) -> str:
    """Expand user home directory and environment variables in path."""
    return os.path.expanduser(os.path.expandvars(path))


def load_config(config_path: str | None = None) -> dict:
    """Load the YAML config file.

    An explicit ``config_path`` (or $RGDEPLOY_CONFIG) must exist; the default
    ~/.rgdeploy.yaml is optional.
    """
    explicit = config_path or os.environ.get("RGDEPLOY_CONFIG")
    path = _expand_path(explicit or DEFAULT_CONFIG_PATH)

    if not os.path.isfile(path):
        if explicit:
            raise FileNotFoundError(f"Config file not found: {path}")
        return {}

    with open(path) as f:
        try:
            config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Error parsing YAML config {path}: {e}") from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return config


def load_settings(config_path: str | None = None) -> Settings:
    """Load Settings from the config file and environment."""
    config = load_config(config_path)
    for key, var in _ENV_OVERRIDES.items():
        value = os.environ.get(var)
        if value:
            config[key] = value
    return Settings.from_dict(config)
