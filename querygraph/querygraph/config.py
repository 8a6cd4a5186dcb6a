"""Engine configuration loaded from environment variables."""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from querygraph.graph.dag_builder import DEFAULT_MAX_NODES

logger = logging.getLogger(__name__)


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class Settings(BaseSettings):
    """Application settings loaded from environment variables with QUERYGRAPH_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="QUERYGRAPH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    debug: bool = False

    # Logging
    log_level: LogLevel = LogLevel.INFO
    structured_logging: bool = False

    # Query front end
    source_dialect: str | None = None
    target_dialect: str = "duckdb"

    # Registry
    strict_registration: bool = False

    # Graph
    max_graph_nodes: int = Field(default=DEFAULT_MAX_NODES, gt=0)

    @field_validator("source_dialect", mode="before")
    @classmethod
    def blank_dialect_is_generic(cls, v: str | None) -> str | None:
        if v is None or not str(v).strip():
            return None
        return str(v).strip().lower()

    def effective_log_level(self) -> int:
        if self.debug:
            return logging.DEBUG
        return logging.getLevelName(self.log_level.value)


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment, with optional overrides for testing."""
    settings = Settings(**overrides)  # type: ignore[arg-type]

    if settings.debug:
        logger.info("Loaded settings (max_graph_nodes=%d)", settings.max_graph_nodes)

    return settings
