"""
Configuration Module
====================

Application settings and canonical enumerations using Pydantic.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="servicedesk-sla", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== SLA Policy ==========
    sla_policy_path: Path = Field(
        default=Path("sla_policy.yaml"),
        description="Path to SLA policy YAML file"
    )
    watch_sla_policy: bool = Field(
        default=True,
        description="Reload the SLA policy when the file changes"
    )

    # ========== Workflow ==========
    creator_can_cancel: bool = Field(
        default=False,
        description="Allow a ticket creator to close (cancel) their own New ticket"
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class Priority(str, Enum):
    """Ticket priority levels."""
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TicketStatus(str, Enum):
    """Ticket lifecycle statuses."""
    NEW = "New"
    OPEN = "Open"
    PENDING = "Pending"
    CLOSED = "Closed"


class Role(str, Enum):
    """User roles known to the status workflow."""
    NORMAL_USER = "Normal User"
    TECHNICAL_USER = "Technical User"
    TECHNICAL_SUPERVISOR = "Technical Supervisor"
    SYSTEM_ADMIN = "System Admin"


class SLACompliance(str, Enum):
    """SLA compliance states."""
    MET = "met"
    VIOLATED = "violated"
    AT_RISK = "at_risk"
    ON_TRACK = "on_track"


class AlertType(str, Enum):
    """Alert types handed to the notification channel."""
    SLA_VIOLATION = "sla_violation"
    STATUS_CHANGE = "status_change"
    ASSIGNMENT = "assignment"
    TICKET_CREATED = "ticket_created"
    NEW_MESSAGE = "new_message"


class AlertSeverity(str, Enum):
    """Alert severities."""
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


# ========== Lists for validation ==========

VALID_PRIORITIES = [
    Priority.CRITICAL, Priority.HIGH,
    Priority.MEDIUM, Priority.LOW
]
VALID_STATUSES = [
    TicketStatus.NEW, TicketStatus.OPEN,
    TicketStatus.PENDING, TicketStatus.CLOSED
]
VALID_ROLES = [
    Role.NORMAL_USER, Role.TECHNICAL_USER,
    Role.TECHNICAL_SUPERVISOR, Role.SYSTEM_ADMIN
]
OPEN_STATUSES = [TicketStatus.NEW, TicketStatus.OPEN, TicketStatus.PENDING]
