import os
from dataclasses import dataclass, fields
from typing import Optional

from artrec.config.constants import (
    APPROVAL_WINDOW, BEHAVIOR_LOG_WINDOW, READ_TIMEOUT_SECONDS,
    TOP_K_CATEGORIES, TOP_K_STYLES, TOP_K_TAGS, TOP_K_CREATORS
)

ENV_PREFIX = "ARTREC_"


@dataclass
class PipelineConfig:
    """
    Settings for one snapshot build.
    Defaults come from constants.py; from_env() overlays ARTREC_* variables.
    """
    # Locations
    DATA_DIR: str = "data"
    OUTPUT_DIR: str = "data/snapshot"

    # Read windows
    APPROVAL_WINDOW: Optional[int] = APPROVAL_WINDOW  # None = no bound
    BEHAVIOR_WINDOW: int = BEHAVIOR_LOG_WINDOW

    # Deadline for the (I/O bound) read stage
    READ_TIMEOUT_SECONDS: Optional[float] = READ_TIMEOUT_SECONDS

    # Global stats truncation
    TOP_K_CATEGORIES: int = TOP_K_CATEGORIES
    TOP_K_STYLES: int = TOP_K_STYLES
    TOP_K_TAGS: int = TOP_K_TAGS
    TOP_K_CREATORS: int = TOP_K_CREATORS

    LOG_LEVEL: str = "INFO"

    def __post_init__(self):
        if self.APPROVAL_WINDOW is not None and self.APPROVAL_WINDOW <= 0:
            raise ValueError("APPROVAL_WINDOW must be positive or None")
        if self.BEHAVIOR_WINDOW <= 0:
            raise ValueError("BEHAVIOR_WINDOW must be positive")
        if self.READ_TIMEOUT_SECONDS is not None and self.READ_TIMEOUT_SECONDS <= 0:
            raise ValueError("READ_TIMEOUT_SECONDS must be positive or None")

    @classmethod
    def from_env(cls, environ=None) -> "PipelineConfig":
        """Build a config from ARTREC_<FIELD> environment variables."""
        environ = os.environ if environ is None else environ
        overrides = {}
        for field in fields(cls):
            raw = environ.get(ENV_PREFIX + field.name)
            if raw is None:
                continue
            overrides[field.name] = _coerce(field.name, raw)
        return cls(**overrides)


def _coerce(name: str, raw: str):
    if name in ("DATA_DIR", "OUTPUT_DIR", "LOG_LEVEL"):
        return raw
    if raw.strip().lower() in ("", "none"):
        return None
    if name == "READ_TIMEOUT_SECONDS":
        return float(raw)
    return int(raw)


def get_default_config() -> PipelineConfig:
    """Get default configuration."""
    return PipelineConfig()
