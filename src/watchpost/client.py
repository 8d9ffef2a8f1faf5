"""The watchpost client: independent capabilities composed by delegation.

Each capability is a separate object that can be used (and replaced in
tests) on its own:

- ``errors``: exception and message capture (:class:`ErrorCapture`)
- ``performance``: transactions and spans (:class:`Tracer`)
- ``breadcrumbs``: breadcrumb trail (:class:`BreadcrumbTracker`)
- ``users``: affected user (:class:`UserContext`)
- ``scopes``: nested scopes (:class:`ScopeStack`)
- ``crons``: scheduled-job check-ins (:class:`CronMonitor`)
- ``feedback``: end-user feedback (:class:`FeedbackCapture`)
- ``releases``: release and deployment markers (:class:`ReleaseTracker`)

The client's own methods are thin shortcuts to those capabilities. All
delivery goes through the injected backend.

Usage:
    client = WatchpostClient(RecordingBackend(), load_app_config())
    client.set_user_id("42")
    try:
        handle()
    except Exception as e:
        client.capture_exception(e)
"""

import asyncio
import random
from collections.abc import Awaitable, Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Mapping, Protocol, TypeVar

from watchpost.backend.base import BackendClient, Feedback
from watchpost.capture import BeforeSend, ErrorCapture, FeedbackCapture, ScopeMutator
from watchpost.config.settings import WatchpostConfig
from watchpost.crons.models import MonitorConfig
from watchpost.crons.monitor import CronJobMonitor, CronMonitor, cron_job, monitored, monitored_async
from watchpost.enrichment.base import Enricher
from watchpost.enrichment.chain import EnricherChain
from watchpost.enrichment.enrichers import EnvironmentEnricher, ReleaseEnricher
from watchpost.filtering.engine import FilterEngine
from watchpost.ids import EventId
from watchpost.releases import ReleaseTracker
from watchpost.sampling.sampler import Sampler, TracesSampler
from watchpost.scope.breadcrumbs import BeforeBreadcrumb, BreadcrumbTracker
from watchpost.scope.models import BreadcrumbLevel, SeverityLevel, User
from watchpost.scope.scope import Scope, ScopeStack
from watchpost.scope.users import UserContext
from watchpost.scrubbing.scrubber import Scrubber
from watchpost.telemetry import FLUSH_CANCELLED, FLUSH_COMPLETED, FLUSH_STARTED, get_logger
from watchpost.tracing.span import Span, Transaction, TransactionOptions
from watchpost.tracing.tracer import Tracer

log = get_logger(__name__)

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])


class CancelSignal(Protocol):
    """Anything with ``is_set()``: threading.Event, asyncio.Event."""

    def is_set(self) -> bool:  # noqa: D102
        ...


class WatchpostClient:
    """Entry point for instrumenting an application.

    Args:
        backend: Delivery collaborator for events, spans, check-ins and feedback.
        config: Configuration snapshot; defaults are used when omitted.
        enrichers: Extra enrichers, run after the built-in ones of equal order.
        default_enrichers: Register ReleaseEnricher and EnvironmentEnricher.
        before_send: Last chance to modify or drop an event (return False).
        before_breadcrumb: Drop breadcrumbs by returning False.
        traces_sampler: Dynamic sampling callback for transactions.
        rng: Random source for sampling decisions.
    """

    def __init__(
        self,
        backend: BackendClient,
        config: WatchpostConfig | None = None,
        *,
        enrichers: Iterable[Enricher] = (),
        default_enrichers: bool = True,
        before_send: BeforeSend | None = None,
        before_breadcrumb: BeforeBreadcrumb | None = None,
        traces_sampler: TracesSampler | None = None,
        rng: Callable[[], float] = random.random,
    ) -> None:  # noqa: D107
        self._backend = backend
        self._config = config or WatchpostConfig()
        cfg = self._config

        root = Scope(max_breadcrumbs=cfg.max_breadcrumbs)
        for key, value in cfg.default_tags.items():
            root.set_tag(key, value)

        chain: list[Enricher] = []
        if default_enrichers:
            chain.append(ReleaseEnricher(cfg.release, cfg.environment))
            chain.append(EnvironmentEnricher())
        chain.extend(enrichers)

        self.filter_engine = FilterEngine(cfg.filtering, cfg.tracing)
        self.scrubber = Scrubber(cfg.scrubbing)
        self.enrichers = EnricherChain(chain)

        self.scopes = ScopeStack(root)
        self.errors = ErrorCapture(
            self.scopes,
            backend,
            cfg,
            self.filter_engine,
            self.enrichers,
            self.scrubber,
            before_send=before_send,
            rng=rng,
        )
        self.performance = Tracer(
            self.scopes,
            backend,
            Sampler(cfg.tracing.sample_rate, traces_sampler, rng=rng),
            cfg.tracing.model_copy(update={"enabled": cfg.tracing.enabled and cfg.enabled}),
            self.filter_engine,
        )
        self.breadcrumbs = BreadcrumbTracker(
            self.scopes, self.scrubber, before_breadcrumb, enabled=cfg.enabled
        )
        self.users = UserContext(self.scopes)
        self.crons = CronMonitor(backend, enabled=cfg.enabled)
        self.feedback = FeedbackCapture(backend, enabled=cfg.enabled)
        self.releases = ReleaseTracker(self.scopes)

    @property
    def config(self) -> WatchpostConfig:
        """The configuration snapshot."""
        return self._config

    @property
    def backend(self) -> BackendClient:
        """The delivery collaborator."""
        return self._backend

    @property
    def is_enabled(self) -> bool:
        """Whether captures are delivered at all."""
        return self._config.enabled

    @property
    def last_event_id(self) -> EventId:
        """ID of the most recently delivered event."""
        return self.errors.last_event_id

    # Errors

    def capture_exception(
        self,
        exception: BaseException,
        configure_scope: ScopeMutator | None = None,
    ) -> EventId:
        """Capture an exception; see :meth:`ErrorCapture.capture_exception`."""
        return self.errors.capture_exception(exception, configure_scope)

    def capture_message(
        self,
        message: str,
        level: SeverityLevel = SeverityLevel.INFO,
        configure_scope: ScopeMutator | None = None,
        status_code: int | None = None,
    ) -> EventId:
        """Capture a message; see :meth:`ErrorCapture.capture_message`."""
        return self.errors.capture_message(message, level, configure_scope, status_code)

    def should_ignore_request(self, url: str | None, user_agent: str | None = None) -> bool:
        """Whether an inbound request is excluded from reporting."""
        return self.filter_engine.should_ignore_request(url, user_agent)

    # Performance

    def start_transaction(
        self,
        name: str,
        op: str,
        options: TransactionOptions | None = None,
        **kwargs: Any,
    ) -> Transaction:
        """Start a transaction bound to the current scope."""
        return self.performance.start_transaction(name, op, options, **kwargs)

    def start_span(self, op: str, description: str | None = None) -> Span | None:
        """Start a child of the current span; None when no span is active."""
        return self.performance.start_span(op, description)

    # Breadcrumbs

    def add_breadcrumb(
        self,
        message: str,
        category: str | None = None,
        type: str | None = None,
        data: Mapping[str, str] | None = None,
        level: BreadcrumbLevel = BreadcrumbLevel.INFO,
    ) -> bool:
        """Add a breadcrumb to the current scope."""
        return self.breadcrumbs.add_breadcrumb(message, category, type, data, level)

    # Users

    def set_user(self, user: User) -> None:
        """Attach a user to subsequent events."""
        self.users.set_user(user)

    def set_user_id(self, user_id: str) -> None:
        """Attach a user known only by ID."""
        self.users.set_user_id(user_id)

    def clear_user(self) -> None:
        """Detach the user."""
        self.users.clear_user()

    @property
    def current_user(self) -> User | None:
        """User on the current scope."""
        return self.users.current_user

    # Scopes

    def configure_scope(self, callback: ScopeMutator) -> None:
        """Apply ``callback`` to the current scope."""
        callback(self.scopes.current)

    def push_scope(self) -> Scope:
        """Push a copy of the current scope."""
        return self.scopes.push()

    def pop_scope(self) -> Scope:
        """Pop the innermost scope."""
        return self.scopes.pop()

    @contextmanager
    def with_scope(self) -> Iterator[Scope]:
        """Work on a nested scope for the duration of the block."""
        with self.scopes.scoped() as scope:
            yield scope

    def set_tag(self, key: str, value: str) -> None:
        """Set a tag on the current scope."""
        self.scopes.current.set_tag(key, value)

    def set_extra(self, key: str, value: Any) -> None:
        """Set an extra value on the current scope."""
        self.scopes.current.set_extra(key, value)

    def set_context(self, key: str, value: Any) -> None:
        """Set a structured context on the current scope."""
        self.scopes.current.set_context(key, value)

    # Releases

    def set_release(
        self,
        version: str,
        environment: str | None = None,
        commit_sha: str | None = None,
    ) -> None:
        """Tag subsequent events with a release."""
        self.releases.set_release(version, environment, commit_sha)

    def set_deployment(
        self,
        deployment_id: str,
        deployed_by: str | None = None,
        deployed_at: datetime | None = None,
    ) -> None:
        """Attach deployment details to subsequent events."""
        self.releases.set_deployment(deployment_id, deployed_by, deployed_at)

    # Feedback

    def capture_feedback(self, feedback: Feedback) -> None:
        """Send end-user feedback."""
        self.feedback.capture_feedback(feedback)

    # Crons

    def start_cron_job(self, slug: str | MonitorConfig) -> CronJobMonitor:
        """Begin one monitored job execution."""
        return CronJobMonitor.start(self.crons, slug)

    def run_cron_monitored(self, slug: str | MonitorConfig, body: Callable[[], T]) -> T:
        """Run ``body`` as one monitored job execution."""
        return monitored(self.crons, slug, body)

    async def run_cron_monitored_async(
        self,
        slug: str | MonitorConfig,
        body: Callable[[], Awaitable[T]],
    ) -> T:
        """Await ``body`` as one monitored job execution."""
        return await monitored_async(self.crons, slug, body)

    def cron_job(self, slug: str | MonitorConfig) -> Callable[[F], F]:
        """Decorator reporting each call as a job execution."""
        return cron_job(self.crons, slug)

    # Delivery

    def flush(self, timeout: float | None = None, cancel_event: CancelSignal | None = None) -> bool:
        """Wait for queued items to be delivered.

        The cancellation signal is checked once, before delegating to the
        backend; in-flight work is never interrupted.

        Args:
            timeout: Deadline in seconds; defaults to the shutdown timeout.
            cancel_event: Optional signal; if already set, nothing is flushed.

        Returns:
            True if the backend reports everything delivered.
        """
        if cancel_event is not None and cancel_event.is_set():
            log.info(FLUSH_CANCELLED)
            return False
        timeout = self._config.shutdown_timeout_seconds if timeout is None else timeout
        log.debug(FLUSH_STARTED, timeout=timeout)
        drained = self._backend.flush(timeout)
        log.debug(FLUSH_COMPLETED, drained=drained)
        return drained

    async def flush_async(
        self,
        timeout: float | None = None,
        cancel_event: CancelSignal | None = None,
    ) -> bool:
        """Async variant of :meth:`flush`; the backend flush runs in a worker thread."""
        if cancel_event is not None and cancel_event.is_set():
            log.info(FLUSH_CANCELLED)
            return False
        return await asyncio.to_thread(self.flush, timeout)

    def close(self) -> bool:
        """Flush with the configured shutdown timeout."""
        return self.flush()

    def __enter__(self) -> "WatchpostClient":
        return self

    def __exit__(self, exc_type: Any, exc: BaseException | None, tb: Any) -> None:
        self.close()
