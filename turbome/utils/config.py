"""Service configuration definition."""

import os
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from turbome.services.base import ConfigurationError


class ServiceConfig(BaseSettings):
    """
    Defines the configuration for the TurboMe server, loaded from environment
    variables or a .env file.
    """

    # We do not specify env_file here.
    # Environment loading is handled explicitly in main.py via load_dotenv
    # to ensure the correct .env file is used.
    model_config = SettingsConfigDict(extra="ignore")

    # "production" serves the directory the process was started in.
    APP_ENV: str = Field(
        default="development",
        validation_alias=AliasChoices("APP_ENV", "NODE_ENV"),
    )
    # Root of the markdown tree and git working copy. Required outside production.
    STORAGE_DIR: Path | None = None

    HOST: str = "0.0.0.0"
    PORT: int = 3001
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    # Run `git init` in the storage root on startup when it is not a repository.
    GIT_AUTO_INIT: bool = False
    GIT_DEFAULT_BRANCH: str = "main"

    # Subprocess timeouts in seconds.
    GIT_TIMEOUT: float = 10.0
    GIT_COMMIT_TIMEOUT: float = 15.0
    GIT_PROBE_TIMEOUT: float = 5.0

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower() == "production"

    def get_storage_dir(self) -> Path:
        """
        Resolve the storage root for this process.

        Returns:
            Absolute path of an existing directory.

        Raises:
            ConfigurationError: If STORAGE_DIR is required but missing, or does
                not point at a directory.
        """
        if self.is_production and self.STORAGE_DIR is None:
            return Path(os.getcwd()).resolve()

        if self.STORAGE_DIR is None:
            raise ConfigurationError(
                "STORAGE_DIR environment variable must be set in development mode"
            )

        storage_dir = self.STORAGE_DIR.expanduser().resolve()
        if not storage_dir.is_dir():
            raise ConfigurationError(f"STORAGE_DIR '{storage_dir}' is not a directory")
        return storage_dir
