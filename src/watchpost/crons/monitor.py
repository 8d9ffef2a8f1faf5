"""Scheduled-job check-ins.

A job reports ``in_progress`` when it starts and exactly one terminal
status (``ok`` or ``error``) when it ends. CronJobMonitor enforces that:
an explicit second ``complete()``/``fail()`` is a programmer error, and a
monitor that is exited without either reports ``error`` on its own.

Usage:
    with CronJobMonitor.start(client.crons, "nightly-cleanup") as job:
        cleanup()
        job.complete()

    monitored(client.crons, "nightly-cleanup", cleanup)

    @cron_job(client.crons, "hourly-sync")
    async def sync() -> None: ...
"""

import functools
import inspect
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from watchpost.crons.models import CheckInStatus, MonitorConfig
from watchpost.errors import IllegalStateError, InvalidInputError, require_text
from watchpost.telemetry import (
    CHECK_IN_ERROR,
    CHECK_IN_FAILED_ON_EXIT,
    CHECK_IN_FALLBACK_ERROR,
    CHECK_IN_OK,
    CHECK_IN_STARTED,
    get_logger,
)

if TYPE_CHECKING:
    from watchpost.backend.base import BackendClient

log = get_logger(__name__)

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])


class CronMonitor:
    """Sends check-ins for scheduled jobs through the backend.

    Args:
        backend: Backend that receives the check-ins.
        enabled: When False, check-ins are not sent and IDs are still returned.
    """

    def __init__(self, backend: "BackendClient", enabled: bool = True) -> None:  # noqa: D107
        self._backend = backend
        self._enabled = enabled

    def check_in(self, slug: str, status: CheckInStatus, check_in_id: str | None = None) -> str:
        """Report a check-in.

        Args:
            slug: Monitor slug.
            status: Reported status.
            check_in_id: Correlation ID from the matching in-progress check-in.

        Returns:
            The correlation ID.

        Raises:
            InvalidInputError: If slug is empty.
        """
        require_text(slug, "monitor slug")
        if not self._enabled:
            return check_in_id or ""
        return self._backend.capture_check_in(slug, status, check_in_id)

    def check_in_progress(self, slug: str) -> str:
        """Report that a job started; returns the ID for the terminal check-in."""
        check_in_id = self.check_in(slug, CheckInStatus.IN_PROGRESS)
        log.info(CHECK_IN_STARTED, slug=slug, check_in_id=check_in_id)
        return check_in_id

    def check_in_ok(self, slug: str, check_in_id: str | None = None) -> str:
        """Report that a job finished successfully."""
        check_in_id = self.check_in(slug, CheckInStatus.OK, check_in_id)
        log.info(CHECK_IN_OK, slug=slug, check_in_id=check_in_id)
        return check_in_id

    def check_in_error(self, slug: str, check_in_id: str | None = None) -> str:
        """Report that a job failed."""
        check_in_id = self.check_in(slug, CheckInStatus.ERROR, check_in_id)
        log.warning(CHECK_IN_ERROR, slug=slug, check_in_id=check_in_id)
        return check_in_id


class CronJobMonitor:
    """One execution of a scheduled job, completed exactly once.

    Create with :meth:`start`; it sends the in-progress check-in.
    """

    def __init__(self, cron_monitor: CronMonitor, slug: str, check_in_id: str) -> None:  # noqa: D107
        self._cron_monitor = cron_monitor
        self.slug = slug
        self.check_in_id = check_in_id
        self._status = CheckInStatus.IN_PROGRESS
        self._closed = False

    @classmethod
    def start(cls, cron_monitor: CronMonitor, slug_or_config: str | MonitorConfig) -> "CronJobMonitor":
        """Send the in-progress check-in and return the monitor.

        Args:
            cron_monitor: Capability that sends check-ins.
            slug_or_config: Monitor slug or full monitor definition.

        Raises:
            InvalidInputError: If the slug is empty or cron_monitor is None.
        """
        if cron_monitor is None:
            raise InvalidInputError("cron_monitor must not be None")
        slug = slug_or_config.slug if isinstance(slug_or_config, MonitorConfig) else slug_or_config
        require_text(slug, "monitor slug")
        check_in_id = cron_monitor.check_in_progress(slug)
        return cls(cron_monitor, slug, check_in_id)

    @property
    def status(self) -> CheckInStatus:
        """Current status of this execution."""
        return self._status

    @property
    def is_completed(self) -> bool:
        """Whether a terminal status has been reported."""
        return self._status.is_terminal

    def _ensure_not_completed(self) -> None:
        if self._status.is_terminal:
            raise IllegalStateError(
                f"Cron job '{self.slug}' has already been completed with status {self._status.value}"
            )

    def complete(self) -> None:
        """Report success.

        Raises:
            IllegalStateError: If a terminal status was already reported.
        """
        self._ensure_not_completed()
        self._cron_monitor.check_in_ok(self.slug, self.check_in_id)
        self._status = CheckInStatus.OK

    def fail(self) -> None:
        """Report failure.

        Raises:
            IllegalStateError: If a terminal status was already reported.
        """
        self._ensure_not_completed()
        self._cron_monitor.check_in_error(self.slug, self.check_in_id)
        self._status = CheckInStatus.ERROR

    def execute(self, body: Callable[[], T]) -> T:
        """Run the job body, completing on return and failing on error.

        Exceptions from the body are re-raised unchanged. A failed success
        check-in is reported as a failed run and its error re-raised.
        """
        try:
            result = body()
            if not self.is_completed:
                self.complete()
        except BaseException as e:
            self._fail_on_exit(e)
            raise
        return result

    async def execute_async(self, body: Callable[[], Awaitable[T]]) -> T:
        """Async variant of :meth:`execute`; suspends only inside the body."""
        try:
            result = await body()
            if not self.is_completed:
                self.complete()
        except BaseException as e:
            self._fail_on_exit(e)
            raise
        return result

    def _fail_on_exit(self, exc: BaseException | None) -> None:
        if self._closed:
            return
        self._closed = True
        if self.is_completed:
            return
        try:
            self.fail()
        except Exception as e:
            log.warning(
                CHECK_IN_FALLBACK_ERROR,
                slug=self.slug,
                check_in_id=self.check_in_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return
        if exc is None:
            log.warning(CHECK_IN_FAILED_ON_EXIT, slug=self.slug, check_in_id=self.check_in_id)

    def close(self) -> None:
        """Release the monitor; reports failure if no terminal status was sent. Never raises."""
        self._fail_on_exit(None)

    def __enter__(self) -> "CronJobMonitor":
        return self

    def __exit__(self, exc_type: Any, exc: BaseException | None, tb: Any) -> None:
        self._fail_on_exit(exc)

    async def __aenter__(self) -> "CronJobMonitor":
        return self

    async def __aexit__(self, exc_type: Any, exc: BaseException | None, tb: Any) -> None:
        self._fail_on_exit(exc)


def monitored(cron_monitor: CronMonitor, slug: str | MonitorConfig, body: Callable[[], T]) -> T:
    """Run ``body`` as one monitored execution of ``slug``."""
    with CronJobMonitor.start(cron_monitor, slug) as job:
        return job.execute(body)


async def monitored_async(
    cron_monitor: CronMonitor,
    slug: str | MonitorConfig,
    body: Callable[[], Awaitable[T]],
) -> T:
    """Await ``body`` as one monitored execution of ``slug``."""
    async with CronJobMonitor.start(cron_monitor, slug) as job:
        return await job.execute_async(body)


def cron_job(cron_monitor: CronMonitor, slug: str | MonitorConfig) -> Callable[[F], F]:
    """Decorator that reports every call of a function as a job execution.

    Works with sync and async functions.
    """

    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            return monitored(cron_monitor, slug, lambda: fn(*args, **kwargs))

        @functools.wraps(fn)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            return await monitored_async(cron_monitor, slug, lambda: fn(*args, **kwargs))

        if inspect.iscoroutinefunction(fn):
            return async_wrapper  # type: ignore[return-value]
        return sync_wrapper  # type: ignore[return-value]

    return decorator
