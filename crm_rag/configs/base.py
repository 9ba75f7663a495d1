"""
Shared settings for the retrieval service.

Every settings group reads the same .env file and carries the service-wide
fields below. Subclasses add their own env prefix.

Dependencies: pydantic, pydantic_settings
System role: Common base of the crm_rag settings groups
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class CrmRagBaseSettings(BaseSettings):
    """Settings every crm_rag config group shares."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    service_name: str = Field(
        default="crm-rag",
        description="Service name in startup and shutdown log lines",
    )
    environment: str = Field(
        default="development",
        description="Deployment environment (development, staging, production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level handed to configure_logging",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level
