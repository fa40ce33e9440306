from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from storykit.exceptions import ConfigurationError

# Load .env file from the working directory
_env_path = Path.cwd() / ".env"
if _env_path.exists():
    load_dotenv(_env_path)


DEFAULT_CONFIG_PATH = "config.yml"
DEFAULT_TIMEOUT_SECONDS = 300.0


class AssetPathSettings(BaseModel):
    domain: str = ""

    model_config = ConfigDict(frozen=True)


class ProjectInitDate(BaseModel):
    # Kept raw: shape is checked by the pre-flight date validator, not at load time.
    year: Any = None
    month: Any = None

    model_config = ConfigDict(frozen=True)


class PublishSettings(BaseModel):
    story_root: str = Field("machinist/dist", alias="storyRoot")
    assets_root: str = Field("cdnassets/projects", alias="assetsRoot")
    assets_dir: str = Field("cdnassets", alias="assetsDir")
    cache_dir: str = Field(".", alias="cacheDir")
    simulate: bool = False
    acl: str | None = "public-read"
    timeout_seconds: float = Field(DEFAULT_TIMEOUT_SECONDS, gt=0.0, alias="timeoutSeconds")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("story_root", "assets_root")
    @classmethod
    def _strip_slashes(cls, value: str) -> str:
        return value.strip("/")


class RemoteStoreSettings(BaseModel):
    """Names the environment variables holding one bucket's credentials."""

    bucket_env: str
    region_env: str
    access_key_env: str
    secret_key_env: str
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    model_config = ConfigDict(frozen=True)

    @property
    def bucket(self) -> str:
        value = os.getenv(self.bucket_env)
        if not value:
            raise ConfigurationError(
                f"Environment variable '{self.bucket_env}' is required for publishing",
                {"variable": self.bucket_env},
            )
        return value

    @property
    def region(self) -> str | None:
        return os.getenv(self.region_env) or None

    @property
    def access_key_id(self) -> str | None:
        return os.getenv(self.access_key_env) or None

    @property
    def secret_access_key(self) -> str | None:
        return os.getenv(self.secret_key_env) or None


class Settings(BaseModel):
    project_name: str = Field(alias="projectName")
    dest: str = "www"
    asset_path: AssetPathSettings = Field(default_factory=AssetPathSettings, alias="assetPath")
    project_init_date: ProjectInitDate = Field(default_factory=ProjectInitDate, alias="projectInitDate")
    publish: PublishSettings = Field(default_factory=PublishSettings)
    root: Path = Field(default_factory=Path.cwd)

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("project_name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("projectName must not be empty")
        return value

    @property
    def dest_dir(self) -> Path:
        return self.root / self.dest

    @property
    def story_store(self) -> RemoteStoreSettings:
        return RemoteStoreSettings(
            bucket_env="BUCKET_NAME",
            region_env="AWS_DEFAULT_REGION",
            access_key_env="AWS_ACCESS_KEY_ID",
            secret_key_env="AWS_SECRET_ACCESS_KEY",
            timeout_seconds=self.publish.timeout_seconds,
        )

    @property
    def assets_store(self) -> RemoteStoreSettings:
        return RemoteStoreSettings(
            bucket_env="ASSETS_BUCKET_NAME",
            region_env="ASSETS_AWS_DEFAULT_REGION",
            access_key_env="ASSETS_AWS_ACCESS_KEY_ID",
            secret_key_env="ASSETS_AWS_SECRET_ACCESS_KEY",
            timeout_seconds=self.publish.timeout_seconds,
        )

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings from the project's YAML configuration file.

        Args:
            path: Optional path to configuration file. If not provided, uses
                STORYKIT_CONFIG environment variable or defaults to config.yml.

        Returns:
            Settings instance rooted at the configuration file's directory.

        Raises:
            FileNotFoundError: If configuration file does not exist.
            ConfigurationError: If configuration is invalid.
        """
        config_path = path or Path(os.getenv("STORYKIT_CONFIG", DEFAULT_CONFIG_PATH))
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        with config_path.open("r", encoding="utf-8") as fp:
            try:
                payload = yaml.safe_load(fp) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")
        payload.setdefault("root", config_path.resolve().parent)
        try:
            return cls(**payload)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}", {"path": str(config_path)}) from exc


__all__ = [
    "Settings",
    "AssetPathSettings",
    "ProjectInitDate",
    "PublishSettings",
    "RemoteStoreSettings",
]
