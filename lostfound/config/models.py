"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .duration import DurationParseError, parse_duration, validate_duration_range


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


def _window_to_seconds(value: str) -> int:
    """Parse a recency window and check it lies between one hour and a year."""
    seconds = parse_duration(value)
    validate_duration_range(seconds, label="Recency window")
    return seconds


class ScoringWeights(BaseModel):
    """Maximum points each similarity factor can contribute.

    The weights must add up to exactly 100 so a perfect match scores 100
    and the combined score only ever needs clamping, never rescaling.
    """

    category: int = Field(30, ge=0, le=100, description="Exact category match")
    keywords: int = Field(30, ge=0, le=100, description="Title/description keyword overlap")
    location: int = Field(20, ge=0, le=100, description="Free-text location similarity")
    recency: int = Field(10, ge=0, le=100, description="Closeness of the two posting times")
    distance: int = Field(10, ge=0, le=100, description="Geographic distance between coordinates")

    @model_validator(mode="after")
    def validate_total(self):
        """Weights must sum to 100."""
        total = sum(self.as_dict().values())
        if total != 100:
            raise ValueError(f"Scoring weights must sum to 100, got {total}")
        return self

    def as_dict(self) -> Dict[str, int]:
        """Return the weight table keyed by factor name."""
        return {
            "category": self.category,
            "keywords": self.keywords,
            "location": self.location,
            "recency": self.recency,
            "distance": self.distance,
        }


class CampusMatchingConfig(BaseModel):
    """Per-campus overrides for the matching engine."""

    auto_match_enabled: bool = Field(True, description="Run matching for items on this campus")
    recency_window: Optional[str] = Field(
        None, description="Recency window override (defaults to matching.recency_window)"
    )

    recency_window_seconds: Optional[int] = None

    @field_validator("recency_window")
    @classmethod
    def validate_recency_window(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        try:
            _window_to_seconds(v)
        except DurationParseError as e:
            raise ValueError(str(e)) from e
        return v

    @model_validator(mode="after")
    def compute_window_seconds(self):
        if self.recency_window is not None:
            self.recency_window_seconds = _window_to_seconds(self.recency_window)
        return self


class MatchingConfig(BaseModel):
    """Tunable thresholds and limits for the smart matching engine."""

    notify_threshold: int = Field(
        25, ge=0, le=100, description="Minimum score that generates notifications"
    )
    email_threshold: int = Field(
        50, ge=0, le=100, description="Minimum score that additionally triggers email"
    )
    candidate_limit: int = Field(
        50, ge=1, le=500, description="Maximum opposite-type items fetched per run"
    )
    top_n: int = Field(5, ge=1, le=50, description="Maximum matches returned per run")
    recency_window: str = Field(
        "30d", description="Time gap at which the recency factor reaches zero"
    )
    distance_radius_meters: float = Field(
        1000.0, gt=0, le=50000, description="Distance at which the distance factor reaches zero"
    )
    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    campuses: Dict[str, CampusMatchingConfig] = Field(
        default_factory=dict, description="Per-campus overrides keyed by campus id"
    )

    recency_window_seconds: Optional[int] = None

    @field_validator("recency_window")
    @classmethod
    def validate_recency_window(cls, v: str) -> str:
        try:
            _window_to_seconds(v)
        except DurationParseError as e:
            raise ValueError(str(e)) from e
        return v

    @model_validator(mode="after")
    def compute_window_seconds(self):
        self.recency_window_seconds = _window_to_seconds(self.recency_window)
        return self

    def recency_window_for(self, campus_id: Optional[str]) -> int:
        """Recency window in seconds for a campus, honouring overrides."""
        override = self.campuses.get(str(campus_id)) if campus_id is not None else None
        if override is not None and override.recency_window_seconds:
            return override.recency_window_seconds
        return self.recency_window_seconds

    def is_enabled_for(self, campus_id: Optional[str]) -> bool:
        """Whether automatic matching is enabled for a campus."""
        override = self.campuses.get(str(campus_id)) if campus_id is not None else None
        return override.auto_match_enabled if override is not None else True


class EmailConfig(BaseModel):
    """Match email delivery settings."""

    enabled: bool = Field(True, description="Send emails for high-confidence matches")
    use_tls: bool = Field(True, description="Use TLS/STARTTLS for secure connection")
    max_retries: int = Field(
        2, ge=0, le=10, description="Number of retry attempts for failed email sends"
    )
    retry_backoff_multiplier: float = Field(
        2.0, ge=1.0, le=5.0, description="Exponential backoff multiplier for retries"
    )
    retry_initial_delay: float = Field(
        2.0, ge=0, le=60, description="Initial retry delay in seconds"
    )
    app_name: str = Field(
        "Lost & Found Campus", min_length=1, description="Product name used in email copy"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class DispatchConfig(BaseModel):
    """Background execution settings for fire-and-forget matching runs."""

    max_workers: int = Field(4, ge=1, le=32, description="Worker threads for matching runs")
    misfire_grace_time: int = Field(
        300, ge=1, le=3600, description="Seconds a queued run may be late before it is dropped"
    )


class AppConfig(BaseModel):
    """Root configuration object for the matching service."""

    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    email: EmailConfig = Field(default_factory=EmailConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    dispatch: DispatchConfig = Field(default_factory=DispatchConfig)
