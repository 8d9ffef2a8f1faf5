"""Admission decisions for captures and inbound requests.

The FilterEngine answers "should this be reported?" for exceptions,
messages, HTTP status codes, requests and transactions. Rejection is a
normal, silent outcome: it is logged at debug level and never raised.
"""

from watchpost.config.models import FilterRules, TracingOptions
from watchpost.filtering.patterns import matches_any
from watchpost.telemetry import EVENT_FILTERED, REQUEST_IGNORED, TRANSACTION_IGNORED, get_logger

log = get_logger(__name__)


def exception_type_name(exc: BaseException) -> str:
    """Return the qualified type name used by ignore rules.

    Builtin exceptions are reported by their bare name (``ValueError``),
    everything else as ``module.QualName``.
    """
    exc_type = type(exc)
    module = exc_type.__module__
    if module == "builtins":
        return exc_type.__qualname__
    return f"{module}.{exc_type.__qualname__}"


class FilterEngine:
    """Pattern-based admission filter.

    Args:
        rules: Filtering rule set (read-only during a pipeline run).
        tracing: Optional tracing options, used for transaction filtering.
    """

    def __init__(self, rules: FilterRules, tracing: TracingOptions | None = None) -> None:  # noqa: D107
        self._rules = rules
        self._tracing = tracing or TracingOptions()

    @property
    def rules(self) -> FilterRules:
        """The active filtering rules."""
        return self._rules

    def is_ignored_exception_type(self, exc: BaseException) -> bool:
        """Whether the exception's type name is on the ignore list.

        Matches the qualified name, the bare class name, and the name under
        the top-level package (``asyncio.exceptions.CancelledError`` is also
        known as ``asyncio.CancelledError``).
        """
        ignored = set(self._rules.ignore_exception_types)
        if not ignored:
            return False

        qualified = exception_type_name(exc)
        exc_type = type(exc)
        top_level = f"{exc_type.__module__.split('.')[0]}.{exc_type.__qualname__}"
        return bool({qualified, exc_type.__qualname__, top_level} & ignored)

    def should_capture_exception(self, exc: BaseException) -> bool:
        """Decide whether an exception is admitted.

        Args:
            exc: The exception to capture.

        Returns:
            False if its type is ignored or its message matches an ignored
            message pattern, True otherwise.
        """
        if self.is_ignored_exception_type(exc):
            log.debug(
                EVENT_FILTERED, reason="exception_type", exception_type=exception_type_name(exc)
            )
            return False

        if matches_any(str(exc), self._rules.ignore_messages):
            log.debug(EVENT_FILTERED, reason="message", exception_type=exception_type_name(exc))
            return False

        return True

    def should_capture_message(self, message: str, status_code: int | None = None) -> bool:
        """Decide whether a message is admitted.

        Args:
            message: Message text.
            status_code: HTTP status code the message is tied to, if any.

        Returns:
            False if the message matches an ignored pattern or the status
            code is ignored, True otherwise.
        """
        if matches_any(message, self._rules.ignore_messages):
            log.debug(EVENT_FILTERED, reason="message")
            return False

        if status_code is not None and status_code in self._rules.ignore_status_codes:
            log.debug(EVENT_FILTERED, reason="status_code", status_code=status_code)
            return False

        return True

    def should_capture_status_code(self, status_code: int) -> bool:
        """Decide whether an HTTP response status warrants an event.

        Args:
            status_code: HTTP response status.

        Returns:
            True for error statuses (400 and above) that are not ignored.
        """
        if status_code < 400:
            return False
        return status_code not in self._rules.ignore_status_codes

    def should_ignore_request(self, url: str | None, user_agent: str | None = None) -> bool:
        """Decide whether an inbound request is excluded from reporting.

        Args:
            url: Request path or URL.
            user_agent: The request's User-Agent header, if any.

        Returns:
            True if the URL or user agent matches an ignore pattern.
        """
        if matches_any(url, self._rules.ignore_urls):
            log.debug(REQUEST_IGNORED, reason="url", url=url)
            return True

        if user_agent and matches_any(user_agent, self._rules.ignore_user_agents):
            log.debug(REQUEST_IGNORED, reason="user_agent", user_agent=user_agent)
            return True

        return False

    def should_ignore_transaction(self, name: str) -> bool:
        """Decide whether a transaction is excluded from tracing.

        Args:
            name: Transaction name (often the request route).

        Returns:
            True if the name matches a tracing ignore pattern.
        """
        if matches_any(name, self._tracing.ignore_urls) or matches_any(
            name, self._tracing.ignore_transactions
        ):
            log.debug(TRANSACTION_IGNORED, transaction=name)
            return True
        return False
