"""Pydantic models for the capture pipeline's rule sets.

This module defines the schema for:
- Filtering rules (ignored exception types, URLs, status codes, messages, user agents)
- Scrubbing rules (sensitive fields, patterns, headers, replacement token, toggles)
- Tracing options (static sample rate, ignored transactions)
- Named sampling rates

All rule sets are read-only snapshots once the client is built.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
import regex

from watchpost.config.validators import validate_patterns, validate_rate


class SamplingRates:
    """Named sampling rates for common deployment profiles."""

    DISABLED = 0.0
    MINIMAL = 0.01
    LOW = 0.1
    STANDARD = 0.25
    RECOMMENDED_PRODUCTION = 0.5
    HIGH = 0.75
    ALL = 1.0
    DEVELOPMENT = 1.0


class FilterRules(BaseModel):
    """Rules deciding which captures and requests are admitted."""

    model_config = ConfigDict(frozen=True)

    ignore_exception_types: list[str] = Field(
        default_factory=lambda: ["asyncio.CancelledError", "KeyboardInterrupt"],
        description="Exception type names never reported (qualified or bare class name)",
    )
    ignore_urls: list[str] = Field(
        default_factory=list, description="Request URL patterns never reported"
    )
    ignore_status_codes: list[int] = Field(
        default_factory=lambda: [404], description="HTTP status codes never reported"
    )
    ignore_messages: list[str] = Field(
        default_factory=list, description="Message patterns never reported"
    )
    ignore_user_agents: list[str] = Field(
        default_factory=lambda: [
            "health*",
            "kube-probe/*",
            "GoogleHC/*",
            "ELB-HealthChecker/*",
        ],
        description="User-agent patterns whose requests are never reported",
    )


class ScrubbingRules(BaseModel):
    """Rules for redacting sensitive values before delivery."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=True, description="Master switch for all scrubbing")
    replacement_text: str = Field(
        default="[Filtered]", min_length=1, description="Token substituted for redacted values"
    )
    sensitive_fields: list[str] = Field(
        default_factory=lambda: [
            "password",
            "passwd",
            "secret",
            "apikey",
            "api_key",
            "apiSecret",
            "api_secret",
            "token",
            "access_token",
            "accessToken",
            "refresh_token",
            "refreshToken",
            "authorization",
            "auth",
            "credentials",
            "credit_card",
            "creditCard",
            "card_number",
            "cardNumber",
            "cvv",
            "cvc",
            "ssn",
            "social_security",
            "socialSecurity",
        ],
        description="Field-name substrings (case-insensitive) whose values are redacted",
    )
    sensitive_patterns: list[str] = Field(
        default_factory=lambda: [
            # Credit card numbers
            r"\b(?:\d{4}[-\s]?){3}\d{4}\b",
            # US social security numbers
            r"\b\d{3}-\d{2}-\d{4}\b",
            # JSON web tokens
            r"eyJ[a-zA-Z0-9_-]*\.eyJ[a-zA-Z0-9_-]*\.[a-zA-Z0-9_-]*",
        ],
        description="Regular expressions whose matches are redacted",
    )
    sensitive_headers: list[str] = Field(
        default_factory=lambda: [
            "Authorization",
            "Cookie",
            "Set-Cookie",
            "X-API-Key",
            "X-Auth-Token",
        ],
        description="Header names (exact, case-insensitive) whose values are redacted",
    )
    scrub_request_bodies: bool = Field(default=True, description="Redact request bodies")
    scrub_query_strings: bool = Field(default=True, description="Redact query strings")
    scrub_cookies: bool = Field(default=True, description="Redact cookie headers and values")
    pattern_timeout_ms: int = Field(
        default=100, ge=1, le=10_000, description="Time budget per redaction pattern"
    )

    @field_validator("sensitive_patterns")
    @classmethod
    def validate_sensitive_patterns(cls, v: list[str]) -> list[str]:
        """Validate every pattern compiles."""
        return validate_patterns(v)

    @model_validator(mode="after")
    def validate_token_is_inert(self) -> "ScrubbingRules":
        """Reject a replacement token that would itself be redacted.

        Scrubbing already-scrubbed data must be a no-op, so the token may not
        contain a sensitive field name nor match a sensitive pattern.
        """
        token = self.replacement_text
        lowered = token.lower()
        for field_name in self.sensitive_fields:
            if field_name and field_name.lower() in lowered:
                raise ValueError(
                    f"replacement_text {token!r} contains sensitive field name {field_name!r}"
                )
        for pattern in self.sensitive_patterns:
            if regex.search(pattern, token, regex.IGNORECASE):
                raise ValueError(
                    f"replacement_text {token!r} matches sensitive pattern {pattern!r}"
                )
        return self


class TracingOptions(BaseModel):
    """Performance monitoring options."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=False, description="Enable transactions and spans")
    sample_rate: float = Field(
        default=SamplingRates.DISABLED, description="Static transaction sample rate"
    )
    ignore_urls: list[str] = Field(
        default_factory=lambda: [
            "/health",
            "/health/*",
            "/healthz",
            "/metrics",
            "/ready",
            "/readyz",
            "/live",
            "/livez",
            "/favicon.ico",
        ],
        description="Transaction names/URLs never traced",
    )
    ignore_transactions: list[str] = Field(
        default_factory=list, description="Transaction name patterns never traced"
    )

    @field_validator("sample_rate")
    @classmethod
    def validate_sample_rate(cls, v: float) -> float:
        """Validate sample rate range."""
        return validate_rate(v, "tracing.sample_rate")
