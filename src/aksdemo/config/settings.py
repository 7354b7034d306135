"""aksdemo Settings configuration.

Uses Pydantic Settings for type-safe configuration management
with support for environment variables and .env files.

The walkthrough variables (RESOURCE_GROUP, CLUSTER_NAME, ...) are read
without a prefix so the same .env file works for the copy-pasteable
`az`/`kubectl` commands in the walkthroughs.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from aksdemo.version import __version__


DEFAULT_ENV_FILE = ".env"

ENV_FILE_TEMPLATE = """\
# Azure Configuration
RESOURCE_GROUP="aks-demo-rg"
LOCATION="eastus"
CLUSTER_NAME="aks-demo-cluster"

# Node Pool Configuration
NODE_COUNT=3
VM_SIZE="Standard_DS2_v2"

# Application Configuration
APP_NAME="containerdemoapp"
APP_VERSION="v1"
NAMESPACE="demo-apps"

# Registry Configuration (optional)
REGISTRY_NAME=""
REGISTRY_LOGIN_SERVER=""
"""


class NetworkSettings(BaseSettings):
    """Virtual network layout for the AKS cluster."""

    model_config = SettingsConfigDict(
        env_prefix="AKSDEMO_NETWORK_",
        extra="ignore",
    )

    vnet_name: str = Field(default="aks-vnet", description="Virtual network name")
    subnet_name: str = Field(default="aks-subnet", description="Subnet for AKS nodes")
    vnet_address_prefix: str = Field(
        default="10.0.0.0/16",
        description="Address space of the virtual network",
    )
    subnet_address_prefix: str = Field(
        default="10.0.1.0/24",
        description="Address prefix of the node subnet",
    )


class AutoscalerSettings(BaseSettings):
    """Cluster autoscaler bounds for the default node pool."""

    model_config = SettingsConfigDict(
        env_prefix="AKSDEMO_AUTOSCALER_",
        extra="ignore",
    )

    min_count: int = Field(default=1, ge=0, description="Minimum node count")
    max_count: int = Field(default=5, ge=1, description="Maximum node count")

    @field_validator("max_count", mode="after")
    @classmethod
    def validate_bounds(cls, v: int, info) -> int:
        """Ensure the autoscaler range is not inverted."""
        min_count = info.data.get("min_count")
        if min_count is not None and v < min_count:
            msg = f"max_count ({v}) must be >= min_count ({min_count})"
            raise ValueError(msg)
        return v


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AKSDEMO_OBSERVABILITY_",
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Logging level",
    )
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )


class VisitsAppSettings(BaseSettings):
    """Multi-service sample app (visit counter backed by Redis)."""

    model_config = SettingsConfigDict(
        env_prefix="AKSDEMO_VISITS_",
        extra="ignore",
        populate_by_name=True,
    )

    redis_host: str = Field(
        default="localhost",
        validation_alias=AliasChoices("AKSDEMO_VISITS_REDIS_HOST", "REDIS_HOST"),
        description="Redis host",
    )
    redis_port: int = Field(
        default=6379,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("AKSDEMO_VISITS_REDIS_PORT", "REDIS_PORT"),
        description="Redis port",
    )
    port: int = Field(default=3000, ge=1, le=65535, description="HTTP listen port")


class Settings(BaseSettings):
    """Main walkthrough configuration."""

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=DEFAULT_ENV_FILE,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    version: str = Field(default=__version__)

    # Azure
    resource_group: str = Field(default="aks-demo-rg", description="Azure resource group")
    location: str = Field(default="eastus", description="Azure region")
    cluster_name: str = Field(default="aks-demo-cluster", description="AKS cluster name")

    # Node pool
    node_count: int = Field(default=3, ge=1, description="Initial node count")
    vm_size: str = Field(default="Standard_DS2_v2", description="Node VM size")

    # Application
    app_name: str = Field(default="containerdemoapp", description="Container image name")
    app_version: str = Field(default="v1", description="Container image tag")
    namespace: str = Field(default="demo-apps", description="Namespace for demo apps")

    # Registry (optional)
    registry_name: str = Field(default="", description="Azure Container Registry name")
    registry_login_server: str = Field(
        default="",
        description="Registry login server, e.g. myregistry.azurecr.io",
    )

    # Nested settings
    network: NetworkSettings = Field(default_factory=NetworkSettings)
    autoscaler: AutoscalerSettings = Field(default_factory=AutoscalerSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)
    visits: VisitsAppSettings = Field(default_factory=VisitsAppSettings)

    @field_validator("registry_login_server", mode="after")
    @classmethod
    def strip_registry_scheme(cls, v: str) -> str:
        """Accept `https://name.azurecr.io/` and keep only the host."""
        value = v.strip()
        for scheme in ("https://", "http://"):
            if value.startswith(scheme):
                value = value[len(scheme):]
        return value.rstrip("/")

    @property
    def image_ref(self) -> str:
        """Local image reference, `APP_NAME:APP_VERSION`."""
        return f"{self.app_name}:{self.app_version}"

    @property
    def registry_image_ref(self) -> str | None:
        """Registry-qualified image reference, or None without a registry."""
        if not self.registry_login_server:
            return None
        return f"{self.registry_login_server}/{self.image_ref}"


def load_settings(env_file: str | Path | None = None) -> Settings:
    """Load settings from the environment and the given .env file.

    The nested groups read the same file, so `AKSDEMO_*` and `REDIS_*`
    keys in .env apply as well. Unlike `get_settings`, the result is not
    cached.
    """
    env_path = str(env_file) if env_file is not None else DEFAULT_ENV_FILE
    return Settings(
        _env_file=env_path,
        network=NetworkSettings(_env_file=env_path),
        autoscaler=AutoscalerSettings(_env_file=env_path),
        observability=ObservabilitySettings(_env_file=env_path),
        visits=VisitsAppSettings(_env_file=env_path),
    )


def write_default_env_file(path: str | Path = DEFAULT_ENV_FILE) -> bool:
    """Create the .env template unless the file already exists.

    Returns:
        True if the file was created, False if it was left untouched.
    """
    env_path = Path(path)
    if env_path.exists():
        return False
    env_path.write_text(ENV_FILE_TEMPLATE, encoding="utf-8")
    return True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Use this function to access settings throughout the application.
    Settings are cached after first load.

    Returns:
        Settings: The application settings instance.
    """
    return load_settings()


def reload_settings() -> Settings:
    """Force reload settings (clears cache).

    Returns:
        Settings: Fresh settings instance.
    """
    get_settings.cache_clear()
    return get_settings()
