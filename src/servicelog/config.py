"""
Logging Configuration.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Façade configuration.

    Read once when loggers and trace writers are built. The TRACE toggle
    itself is not a setting: only the *name* of the variable lives here,
    its value is read on every call.
    """

    model_config = SettingsConfigDict(
        env_prefix="SERVICELOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    trace_env_var: str = Field(default="TRACE", description="Environment variable gating TRACE output")
    trace_encoding: str = Field(default="utf-8", description="Encoding used to decode trace writer records")
    trace_queue_size: int = Field(default=256, ge=1, description="Pending chunks a trace writer buffers before blocking")
    sink_encoding: str = Field(default="utf-8", description="Encoding used when a sink only accepts bytes")


# Singleton instance
settings = LoggingSettings()

__all__ = ["LoggingSettings", "settings"]
