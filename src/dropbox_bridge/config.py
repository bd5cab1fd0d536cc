"""
Configuration management for the Dropbox bridge
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Dropbox account and link settings live in the storage configuration
    (see ``dropbox_bridge.storage.config``).
    """

    # Config files
    storage_config_path: str | None = None
    styles_config_path: str | None = None

    # Image style path tokens
    private_key: str = ""
    hash_salt: str = ""

    # Environment
    debug: bool = False

    class Config:
        env_file = ".env"
        env_prefix = "DROPBOX_BRIDGE_"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()
