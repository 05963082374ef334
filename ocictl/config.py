"""ocictl configuration — loads from environment variables and an optional .env file."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings

from . import __version__

DEFAULT_OCI_CONFIG = Path.home() / ".oci" / "config"


class Settings(BaseSettings):
    """Application settings — populated from env vars or .env file.

    Command-line flags take precedence over every value here.
    """

    # App
    app_name: str = "ocictl"
    app_version: str = __version__

    # OCI credentials
    oci_config_file: Path = DEFAULT_OCI_CONFIG
    profile: str = "DEFAULT"

    # Logging
    debug: bool = False
    log_file: Optional[Path] = None

    model_config = {"env_prefix": "OCICTL_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
