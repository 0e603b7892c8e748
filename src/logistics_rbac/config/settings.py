"""
Runtime configuration for logistics-rbac.

Settings are read from the environment (prefix ``RBAC_``) or a local ``.env``
file through pydantic-settings.
"""
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import CacheTTL, SystemRoles


class RBACSettings(BaseSettings):
    """Settings for the authorization core."""

    model_config = SettingsConfigDict(
        env_prefix="RBAC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database Configuration
    database_url: Optional[str] = Field(default=None, description="PostgreSQL DSN for the RBAC tables")
    db_pool_min_size: int = Field(default=5, ge=1)
    db_pool_max_size: int = Field(default=20, ge=1)
    db_command_timeout: float = Field(default=30.0, gt=0)

    # Cache Configuration
    cache_backend: Literal["redis", "memory"] = Field(default="memory")
    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_max_connections: int = Field(default=20, ge=1)
    redis_socket_timeout: float = Field(default=2.0, gt=0, description="Seconds before a Redis read or connect gives up")
    cache_key_prefix: str = Field(default="perm", min_length=1)
    cache_ttl_seconds: int = Field(default=CacheTTL.PERMISSIONS_SHORT, ge=1)
    memory_cache_max_size: int = Field(default=10000, ge=1)

    # Resolution
    resolution_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Upper bound for one uncached resolution before it fails closed"
    )
    super_admin_designation: str = Field(default=SystemRoles.SUPER_ADMIN, min_length=1)

    @field_validator("database_url")
    @classmethod
    def strip_driver_suffix(cls, v: Optional[str]) -> Optional[str]:
        """asyncpg does not understand SQLAlchemy style ``+asyncpg`` DSNs."""
        if v and "+asyncpg" in v:
            return v.replace("+asyncpg", "")
        return v


@lru_cache()
def get_settings() -> RBACSettings:
    """Get cached settings instance."""
    return RBACSettings()
