"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


class SlotSettings(BaseModel):
    """Default slot generation settings."""
    frequency_minutes: int = 30
    event_length_minutes: int = 30
    minimum_booking_notice_minutes: int = 0
    offset_start_minutes: int = 0
    default_interval_minutes: int = 1  # Fallback start-time granularity
    strict: bool = False

    @field_validator("default_interval_minutes")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure the fallback granularity is positive."""
        if value <= 0:
            raise ValueError(f"Value must be greater than zero, got {value}")
        return value

    @field_validator("minimum_booking_notice_minutes", "offset_start_minutes")
    @classmethod
    def validate_not_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError(f"Value must not be negative, got {value}")
        return value

    @model_validator(mode="after")
    def validate_durations(self) -> "SlotSettings":
        """
        Ensure frequency and event length are positive.

        In strict mode the values are passed through unchecked, so the slot
        generator rejects negative durations itself.
        """
        if self.strict:
            return self
        for name in ("frequency_minutes", "event_length_minutes"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be greater than zero, got {value}")
        return self


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "UTC"
    slots: SlotSettings = Field(default_factory=SlotSettings)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except (ValueError, KeyError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
