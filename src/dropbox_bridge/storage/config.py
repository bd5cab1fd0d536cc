"""Storage configuration system."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


@dataclass
class DropboxConfig:
    """Configuration for the Dropbox provider."""

    token: str | None = None
    client_id: str = "dropbox-bridge"
    scheme: str = "dropbox"
    prefix: str = ""
    public: bool = False
    download_url_base: str = "http://localhost:8088"
    derivation_timeout: float = 30.0


_TRUE_VALUES = {"1", "true", "yes", "on"}


def load_storage_config(
    config_path: Path | None = None, env_prefix: str = "DROPBOX_BRIDGE_"
) -> DropboxConfig:
    """Load Dropbox configuration from file and environment variables.

    Args:
        config_path: Path to YAML configuration file
        env_prefix: Prefix for environment variable overrides

    Returns:
        DropboxConfig instance

    Raises:
        ValueError: If the file cannot be read or a value is malformed
    """
    config_data: dict[str, Any] = {
        "token": None,
        "client_id": "dropbox-bridge",
        "scheme": "dropbox",
        "prefix": "",
        "public": False,
        "download_url_base": "http://localhost:8088",
        "derivation_timeout": 30.0,
    }

    if config_path and config_path.exists():
        try:
            with open(config_path) as f:
                file_config = yaml.safe_load(f) or {}
                if file_config.get("storage"):
                    config_data.update(file_config["storage"])
        except Exception as e:
            raise ValueError(f"Failed to load storage config from {config_path}: {e}") from e

    config_data = _apply_env_overrides(config_data, env_prefix)

    return DropboxConfig(
        token=config_data["token"] or None,
        client_id=config_data["client_id"],
        scheme=config_data["scheme"],
        prefix=config_data["prefix"] or "",
        public=bool(config_data["public"]),
        download_url_base=config_data["download_url_base"],
        derivation_timeout=float(config_data["derivation_timeout"]),
    )


def _apply_env_overrides(config_data: dict[str, Any], env_prefix: str) -> dict[str, Any]:
    """Apply environment variable overrides to configuration."""

    for key in ("token", "client_id", "scheme", "prefix", "download_url_base"):
        value = os.getenv(f"{env_prefix}{key.upper()}")
        if value:
            config_data[key] = value

    public = os.getenv(f"{env_prefix}PUBLIC")
    if public:
        config_data["public"] = public.lower() in _TRUE_VALUES

    timeout = os.getenv(f"{env_prefix}DERIVATION_TIMEOUT")
    if timeout:
        try:
            config_data["derivation_timeout"] = float(timeout)
        except ValueError as e:
            raise ValueError(f"Invalid {env_prefix}DERIVATION_TIMEOUT: {timeout!r}") from e

    return config_data


def create_example_config() -> str:
    """Create an example storage configuration YAML."""

    config = {
        "storage": {
            "token": "${DROPBOX_BRIDGE_TOKEN}",
            "client_id": "my-site",
            "scheme": "dropbox",
            "prefix": "site-files",
            "public": True,
            "download_url_base": "https://www.example.com",
            "derivation_timeout": 30,
        },
        "image_styles": {
            "thumbnail": {
                "label": "Thumbnail (100x100)",
                "effects": [{"id": "image_scale", "width": 100, "height": 100}],
            },
        },
    }

    return yaml.dump(config, default_flow_style=False, indent=2)
