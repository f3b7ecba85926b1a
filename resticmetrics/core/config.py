from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import Dict
from functools import lru_cache
import logging
import warnings

from resticmetrics.domain.models import ExportFormat


def parse_log_level(value: str) -> str:
    """Return the upper-cased level name, or raise ValueError if unknown."""
    level = value.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"unknown log level: {value}")
    return level


class Settings(BaseSettings):
    # Identity
    profile: str = "default"
    group: str = ""
    labels: Dict[str, str] = {}  # extra labels, JSON object in env

    # Build info
    restic_version: str = "unknown"

    # Textfile sink
    save_to_file: str = ""

    # Push gateway sink
    push_url: str = ""
    push_format: ExportFormat = ExportFormat.TEXT
    push_job: str = "resticprofile"
    push_timeout_seconds: float = 30.0

    # Logging
    log_level: str = "INFO"

    class Config:
        env_prefix = "RESTICMETRICS_"
        env_file = ".env"
        env_file_encoding = "utf-8"

    @field_validator("profile")
    @classmethod
    def validate_profile(cls, v: str) -> str:
        """The profile label is mandatory on every series."""
        if not v.strip():
            raise ValueError("profile must not be empty")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        return parse_log_level(v)

    def validate_settings(self) -> list[str]:
        """Check for inconsistent sink settings. Returns list of warnings."""
        issues = []

        if not self.save_to_file and not self.push_url:
            issues.append("No metrics sink configured (save_to_file and push_url are empty)")

        if self.push_format != ExportFormat.TEXT and not self.push_url:
            issues.append(f"push_format={self.push_format.value} has no effect without push_url")

        if self.push_timeout_seconds <= 0:
            issues.append("push_timeout_seconds <= 0: pushes will time out immediately")

        return issues


@lru_cache()
def get_settings() -> Settings:
    instance = Settings()

    for issue in instance.validate_settings():
        warnings.warn(issue, RuntimeWarning)

    return instance
