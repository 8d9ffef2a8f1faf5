"""Redaction of sensitive values before delivery.

The Scrubber applies three kinds of rules from a ScrubbingRules snapshot:
- field names: a key containing a sensitive substring (case-insensitive)
  has its whole value replaced by the replacement token
- patterns: regular expression matches inside text are replaced by the token
- header names: exact (case-insensitive) header matches are replaced

Each pattern runs under a time budget (``pattern_timeout_ms``). A pattern
that exceeds it is skipped for that value and the rest still apply.
"""

from collections.abc import Mapping
from dataclasses import replace
from typing import Any

import regex

from watchpost.config.models import ScrubbingRules
from watchpost.scope.models import Breadcrumb
from watchpost.scope.scope import Scope
from watchpost.telemetry import SCRUB_PATTERN_TIMEOUT, get_logger

log = get_logger(__name__)

_COOKIE_HEADERS = frozenset({"cookie", "set-cookie"})


class Scrubber:
    """Redacts sensitive data from strings, mappings, headers and query strings.

    Args:
        rules: Scrubbing rule set. Patterns are compiled once here.
    """

    def __init__(self, rules: ScrubbingRules) -> None:  # noqa: D107
        self._rules = rules
        self._token = rules.replacement_text
        self._timeout = rules.pattern_timeout_ms / 1000
        self._patterns = [regex.compile(p, regex.IGNORECASE) for p in rules.sensitive_patterns]
        self._fields = [f.casefold() for f in rules.sensitive_fields if f]
        self._headers = {h.casefold() for h in rules.sensitive_headers}

    @property
    def rules(self) -> ScrubbingRules:
        """The active scrubbing rules."""
        return self._rules

    @property
    def enabled(self) -> bool:
        """Whether scrubbing is switched on."""
        return self._rules.enabled

    def is_sensitive_field(self, field_name: str | None) -> bool:
        """Whether a field name contains a configured sensitive substring.

        Args:
            field_name: Key, parameter or attribute name.

        Returns:
            True if any sensitive field name occurs in it, ignoring case.
        """
        if not field_name:
            return False
        lowered = field_name.casefold()
        return any(f in lowered for f in self._fields)

    def is_sensitive_header(self, header_name: str | None) -> bool:
        """Whether a header name is configured as sensitive."""
        if not header_name:
            return False
        lowered = header_name.casefold()
        if lowered in _COOKIE_HEADERS and not self._rules.scrub_cookies:
            return False
        return lowered in self._headers

    def scrub_string(self, value: str | None) -> str | None:
        """Replace every pattern match in a string with the token.

        Args:
            value: Text to scrub.

        Returns:
            Scrubbed text, or the input unchanged when disabled or empty.
        """
        if not value or not self._rules.enabled:
            return value

        result = value
        for pattern in self._patterns:
            try:
                result = pattern.sub(lambda _m: self._token, result, timeout=self._timeout)
            except TimeoutError:
                log.debug(SCRUB_PATTERN_TIMEOUT, pattern=pattern.pattern, budget_s=self._timeout)
        return result

    def scrub_map(self, data: Mapping[str, Any] | None) -> dict[str, Any] | None:
        """Scrub a mapping by key name and by value content.

        Sensitive keys have their value replaced with the token. Other text
        values are passed through :meth:`scrub_string`, nested mappings are
        scrubbed recursively, anything else is kept as is.

        Args:
            data: Mapping to scrub.

        Returns:
            A new dict, or the input unchanged when disabled or None.
        """
        if data is None or not self._rules.enabled:
            return data  # type: ignore[return-value]

        result: dict[str, Any] = {}
        for key, value in data.items():
            if self.is_sensitive_field(str(key)):
                result[key] = self._token
            elif isinstance(value, str):
                result[key] = self.scrub_string(value)
            elif isinstance(value, Mapping):
                result[key] = self.scrub_map(value)
            else:
                result[key] = value
        return result

    def scrub_headers(self, headers: Mapping[str, str] | None) -> dict[str, str] | None:
        """Scrub HTTP headers.

        Args:
            headers: Header mapping.

        Returns:
            A new dict with sensitive headers replaced, or the input
            unchanged when disabled or None.
        """
        if headers is None or not self._rules.enabled:
            return headers  # type: ignore[return-value]

        result: dict[str, str] = {}
        for name, value in headers.items():
            if self.is_sensitive_header(name):
                result[name] = self._token
            else:
                result[name] = self.scrub_string(value) or value
        return result

    def scrub_query_string(self, query_string: str | None) -> str | None:
        """Scrub a URL query string, keeping parameter order.

        Args:
            query_string: Query string, with or without a leading "?".

        Returns:
            Reassembled query string with sensitive values replaced.
        """
        if not query_string or not self._rules.enabled or not self._rules.scrub_query_strings:
            return query_string

        has_leading_question = query_string.startswith("?")
        query = query_string[1:] if has_leading_question else query_string
        if not query:
            return query_string

        scrubbed_parts = []
        for part in query.split("&"):
            key, sep, value = part.partition("=")
            if not sep or not key:
                scrubbed_parts.append(part)
            elif self.is_sensitive_field(key):
                scrubbed_parts.append(f"{key}={self._token}")
            else:
                scrubbed_parts.append(f"{key}={self.scrub_string(value)}")

        result = "&".join(scrubbed_parts)
        return f"?{result}" if has_leading_question else result

    def scrub_url(self, url: str | None) -> str | None:
        """Scrub the query portion of a URL and any pattern matches in the path."""
        if not url or not self._rules.enabled:
            return url
        base, sep, query = url.partition("?")
        base = self.scrub_string(base) or base
        if not sep:
            return base
        return f"{base}?{self.scrub_query_string(query)}"

    def scrub_body(self, body: Any) -> Any:
        """Scrub a request body (text or parsed mapping)."""
        if body is None or not self._rules.enabled or not self._rules.scrub_request_bodies:
            return body
        if isinstance(body, str):
            return self.scrub_string(body)
        if isinstance(body, Mapping):
            return self.scrub_map(body)
        return body

    def scrub_breadcrumb(self, breadcrumb: Breadcrumb) -> Breadcrumb:
        """Return a scrubbed copy of a breadcrumb (breadcrumbs are immutable)."""
        if not self._rules.enabled:
            return breadcrumb
        return replace(
            breadcrumb,
            message=self.scrub_string(breadcrumb.message) or breadcrumb.message,
            data=self.scrub_map(breadcrumb.data) or {},
        )

    def scrub_scope(self, scope: Scope) -> Scope:
        """Redact a scope in place before it is handed to the backend.

        Args:
            scope: The prepared scope for one capture.

        Returns:
            The same scope, for chaining.
        """
        if not self._rules.enabled:
            return scope

        scope.tags = self.scrub_map(scope.tags) or {}
        scope.extra = self.scrub_map(scope.extra) or {}
        scope.contexts = self.scrub_map(scope.contexts) or {}

        scrubbed = [self.scrub_breadcrumb(b) for b in scope.breadcrumbs]
        scope.breadcrumbs.clear()
        scope.breadcrumbs.extend(scrubbed)

        if scope.user is not None and scope.user.data:
            scope.user.data = self.scrub_map(scope.user.data) or {}

        request = scope.request
        if request is not None:
            request.url = self.scrub_url(request.url)
            request.query_string = self.scrub_query_string(request.query_string)
            request.headers = self.scrub_headers(request.headers) or {}
            request.body = self.scrub_body(request.body)
            if self._rules.scrub_cookies:
                request.cookies = {name: self._token for name in request.cookies}

        return scope
