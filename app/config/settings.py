"""
Configuration settings for the Zoom presence automator.
Uses Pydantic Settings for type-safe configuration with environment variable support.
"""

from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_data_dir() -> str:
    return str(Path.home() / ".zoom-automator" / "playwright-profile")


class AutomatorSettings(BaseSettings):
    """Browser automation configuration."""
    model_config = SettingsConfigDict(env_prefix="ZOOM_AUTOMATOR_")

    # Persistent profile (cookies, session storage). Deleting it resets login.
    data_dir: str = Field(default_factory=_default_data_dir, description="Persistent browser profile directory")
    debug_dir: str = Field(default="/tmp/zoom-automator-debug", description="Diagnostic screenshot directory")
    capture_snapshots: bool = Field(default=True, description="Write diagnostic screenshots")

    headless: bool = Field(default=True, description="Run meeting sessions headless")
    viewport_width: int = Field(default=1440, description="Browser viewport width")
    viewport_height: int = Field(default=900, description="Browser viewport height")

    home_url: str = Field(default="https://app.zoom.us/wc/home", description="Zoom web client home")
    signin_url: str = Field(default="https://app.zoom.us/signin", description="Zoom sign-in page")

    # Timeouts (seconds)
    login_timeout_seconds: float = Field(default=600, description="Interactive login window")
    login_poll_interval_seconds: float = Field(default=1.5, description="Login completion poll interval")
    close_timeout_seconds: float = Field(default=10, description="Graceful context close timeout")
    browser_close_timeout_seconds: float = Field(default=5, description="Fallback browser close timeout")
    navigation_timeout_seconds: float = Field(default=20, description="Home navigation timeout")
    join_attempt_timeout_seconds: float = Field(default=75, description="Deadline for one whole join attempt")
    meeting_start_timeout_seconds: float = Field(default=26, description="Active-signal polling window")
    new_page_timeout_seconds: float = Field(default=4.5, description="Wait for a meeting tab to open")

    # Web client pacing (seconds)
    ui_settle_seconds: float = Field(default=1.0, description="Pause for the web client to render after navigation or New Meeting")
    control_probe_timeout_seconds: float = Field(default=2.5, description="Wait for a menu or New Meeting control to appear")
    prompt_probe_timeout_seconds: float = Field(default=0.3, description="Per-entry wait when scanning for optional prompts")

    # Join behavior
    join_max_attempts: int = Field(default=2, ge=1, description="Join attempts for timeout failures")
    retry_delay_seconds: float = Field(default=0.75, description="Pause between join attempts")
    leave_settle_seconds: float = Field(default=0.4, description="Pause after closing the session on leave")

    # Active-meeting heuristic
    require_strong_signal: bool = Field(
        default=False,
        description="Reject weak-only signals even when no pre-join prompt is visible",
    )
    weak_signals: List[str] = Field(
        default_factory=list,
        description="Page signal names downgraded to weak",
    )


class ServerSettings(BaseSettings):
    """Control API server configuration."""
    model_config = SettingsConfigDict(env_prefix="ZOOM_AUTOMATOR_SERVER_")

    host: str = Field(default="127.0.0.1", description="Control API host")
    port: int = Field(default=17394, description="Control API port")
    idle_timeout_seconds: int = Field(default=600, description="Keep-alive timeout for idle connections")


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore"
    )

    # Nested settings
    automator: AutomatorSettings = Field(default_factory=AutomatorSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

    # Application settings
    project_name: str = Field(default="Zoom Automator", description="Service name")
    service_id: str = Field(default="zoom-automator", description="Identifier reported by /health")
    version: str = Field(default="2.0.0", description="Service version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: str = Field(default="logs", description="Log file directory")
    log_to_file: bool = Field(default=True, description="Write rotating log files")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


# Global settings instance
settings = Settings()
