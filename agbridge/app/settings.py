############################################################
#
# agbridge - Multi-format Chat Request Translator
#
# settings.py: Translator configuration and environment settings
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Translator settings using Pydantic Settings."""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_version() -> str:
    """Read version from pyproject.toml (single source of truth)."""
    try:
        from importlib.metadata import version
        return version("agbridge")
    except Exception:
        pass
    # Fallback: read pyproject.toml directly (works in dev without pip install)
    try:
        import tomllib
        toml_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)
        return data["project"]["version"]
    except Exception:
        return "0.0.0"


class CorrelationMissPolicy(str, Enum):
    """What to do when a tool result references an unknown call id."""
    LENIENT = "lenient"  # emit the functionResponse with an empty name
    STRICT = "strict"  # fail the whole request

    @classmethod
    def _missing_(cls, value: object) -> Optional["CorrelationMissPolicy"]:
        """Match values case-insensitively."""
        if isinstance(value, str):
            for member in cls:
                if member.value == value.strip().lower():
                    return member
        return None


class Settings(BaseSettings):
    """Translator configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AGBRIDGE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "agbridge"
    app_version: str = Field(default_factory=_get_version)
    debug: bool = False

    # Translation
    correlation_miss_policy: CorrelationMissPolicy = CorrelationMissPolicy.LENIENT
    emit_system_instruction: bool = True
    emit_generation_config: bool = True

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    log_file: Optional[str] = None

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, v: str) -> str:
        """Only json and console renderers are available."""
        v = v.lower()
        if v not in ("json", "console"):
            raise ValueError(f"log_format must be 'json' or 'console', got {v!r}")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
