"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import AvailabilityMode, OperatingHours, TimeSlot
from .domain.validators import validate_time_slot


class SupabaseConfig(BaseModel):
    """Connection settings for the hosted Supabase project."""
    url: str
    anon_key: str
    access_token: str = ""  # Issued by the app's login flow; anon key is used when empty

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        """Ensure the project URL is an http(s) URL without trailing slash."""
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"Supabase url must start with http:// or https://, got {value!r}")
        return value.rstrip("/")

    def rest_url(self) -> str:
        """Base URL of the PostgREST API."""
        return f"{self.url}/rest/v1"


class OperatingHoursConfig(BaseModel):
    """Hours every slot has to fit into."""
    start_hour: int = 8
    end_hour: int = 19
    enforce: bool = True

    @field_validator("start_hour", "end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @model_validator(mode="after")
    def validate_hours_order(self) -> "OperatingHoursConfig":
        """Ensure the configured window opens before it closes."""
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        return self

    def to_domain(self) -> Optional[OperatingHours]:
        """Operating window for the validators, or None when not enforced."""
        if not self.enforce:
            return None
        return OperatingHours(
            start=f"{self.start_hour:02d}:00",
            end=f"{self.end_hour:02d}:00",
        )


class DefaultSlotConfig(BaseModel):
    """Range proposed when a slot is added without explicit times."""
    start: str = "09:00"
    end: str = "19:00"

    @model_validator(mode="after")
    def validate_range(self) -> "DefaultSlotConfig":
        error = validate_time_slot(TimeSlot(id="default", start=self.start, end=self.end))
        if error is not None:
            raise ValueError(f"default_slot is invalid: {error}")
        return self


class AppConfig(BaseModel):
    """Application configuration."""
    supabase: Optional[SupabaseConfig] = None
    sitter_id: str
    timezone: str = "America/New_York"
    mode: AvailabilityMode = AvailabilityMode.WALKING
    operating_hours: OperatingHoursConfig = Field(default_factory=OperatingHoursConfig)
    default_slot: DefaultSlotConfig = Field(default_factory=DefaultSlotConfig)
    mock_data_file: str = ""

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except (KeyError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("sitter_id")
    @classmethod
    def validate_sitter_id(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("sitter_id must not be empty")
        return value.strip()

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

    def today(self) -> pendulum.Date:
        """Current date in the configured timezone."""
        return pendulum.today(self.timezone).date()

    def resolve_mock_data_path(self, config_path: Optional[Path] = None) -> Optional[Path]:
        """
        Resolve ``mock_data_file`` relative to the config file's directory.
        """
        if not self.mock_data_file:
            return None
        path = Path(self.mock_data_file)
        if not path.is_absolute() and config_path is not None:
            path = config_path.parent / path
        return path


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
