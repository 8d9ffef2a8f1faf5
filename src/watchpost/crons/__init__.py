"""Scheduled-job monitoring."""

from watchpost.crons.models import CheckInStatus, MonitorConfig, ScheduleType
from watchpost.crons.monitor import (
    CronJobMonitor,
    CronMonitor,
    cron_job,
    monitored,
    monitored_async,
)

__all__ = [
    "CheckInStatus",
    "CronJobMonitor",
    "CronMonitor",
    "MonitorConfig",
    "ScheduleType",
    "cron_job",
    "monitored",
    "monitored_async",
]
