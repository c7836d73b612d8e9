"""Configuration management for task-query."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TaskQueryConfig(BaseSettings):
    """Settings for query evaluation, recurrence and the reactive result cache.

    Values are read from ``TASK_QUERY_*`` environment variables.
    """

    model_config = SettingsConfigDict(
        env_prefix="TASK_QUERY_",
        extra="ignore",
    )

    global_query: str = Field(
        default="",
        description="Instructions prepended to every query unless it says 'ignore global query'",
    )

    remove_scheduled_date_on_recurrence: bool = Field(
        default=False,
        description="Drop the scheduled date from the next occurrence of a recurring task",
    )

    refresh_debounce_seconds: float = Field(
        default=0.25,
        ge=0.0,
        description="Seconds to wait after a change notification before re-running a query",
    )

    midnight_buffer_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Seconds after local midnight at which queries are re-evaluated",
    )

    log_level: str = Field(default="INFO", description="Log level for the stderr sink")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"


@lru_cache
def get_config() -> TaskQueryConfig:
    """Process-wide configuration, loaded once from the environment."""
    return TaskQueryConfig()
