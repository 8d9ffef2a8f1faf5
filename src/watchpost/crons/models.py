"""Types for scheduled-job monitoring."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CheckInStatus(str, Enum):
    """State reported for one scheduled-job execution."""

    IN_PROGRESS = "in_progress"
    OK = "ok"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        """Whether this status ends the execution."""
        return self is not CheckInStatus.IN_PROGRESS


class ScheduleType(str, Enum):
    """How a monitor's schedule is expressed."""

    CRONTAB = "crontab"
    INTERVAL = "interval"


class MonitorConfig(BaseModel):
    """Monitor definition sent along with the first check-in.

    Attributes:
        slug: Monitor identifier (e.g. "nightly-cleanup").
        schedule: Crontab expression or interval (e.g. "0 3 * * *", "10 minute").
        schedule_type: How ``schedule`` is interpreted.
        checkin_margin_minutes: Grace period before a missed check-in alerts.
        max_runtime_minutes: Runtime after which an in-progress job is failed.
        timezone: IANA timezone the schedule is evaluated in.
    """

    model_config = ConfigDict(frozen=True)

    slug: str = Field(..., description="Monitor identifier")
    schedule: str | None = Field(None, description="Crontab expression or interval")
    schedule_type: ScheduleType = Field(ScheduleType.CRONTAB, description="Schedule kind")
    checkin_margin_minutes: int | None = Field(None, ge=0, description="Grace period in minutes")
    max_runtime_minutes: int | None = Field(None, ge=1, description="Maximum runtime in minutes")
    timezone: str | None = Field(None, description="IANA timezone name")

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str) -> str:
        """Reject empty slugs."""
        if not v or not v.strip():
            raise ValueError("Monitor slug must be a non-empty string")
        return v
