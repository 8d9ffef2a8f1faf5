"""Data types carried by a Scope.

This module defines:
- SeverityLevel / BreadcrumbLevel: severity enums
- User: the identity attached to events
- Breadcrumb: immutable trail entry describing a prior event
- Attachment: a file sent along with an event
- RequestInfo: the inbound request an event happened in
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, Field


class SeverityLevel(str, Enum):
    """Severity of a captured event."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"


class BreadcrumbLevel(str, Enum):
    """Severity of a breadcrumb."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class User(BaseModel):
    """Identity of the user affected by an event.

    Builder methods mutate and return the instance so calls can be chained:
    ``User(id="42").with_segment("beta").with_data("plan", "pro")``.
    """

    id: str | None = Field(None, description="Unique user identifier")
    email: str | None = Field(None, description="Email address")
    username: str | None = Field(None, description="Display or login name")
    ip_address: str | None = Field(None, description="IP address, or {{auto}} to infer it")
    segment: str | None = Field(None, description="Cohort or segment the user belongs to")
    data: dict[str, str] = Field(default_factory=dict, description="Free-form extra fields")

    def with_data(self, key: str, value: str) -> "User":
        """Add a free-form field."""
        self.data[key] = value
        return self

    def with_ip_address(self, ip_address: str) -> "User":
        """Set the IP address."""
        self.ip_address = ip_address
        return self

    def with_auto_ip_address(self) -> "User":
        """Ask the backend to infer the IP address from the connection."""
        self.ip_address = "{{auto}}"
        return self

    def with_segment(self, segment: str) -> "User":
        """Set the user segment."""
        self.segment = segment
        return self

    @property
    def is_empty(self) -> bool:
        """Whether no identifying field is set."""
        return not any((self.id, self.email, self.username, self.ip_address, self.segment, self.data))


@dataclass(frozen=True)
class Breadcrumb:
    """A timestamped trail entry. Never mutated once recorded.

    Attributes:
        message: Human-readable description.
        category: Dotted category (e.g. "http", "navigation", "query").
        type: Breadcrumb type (e.g. "default", "http", "log").
        level: Breadcrumb severity.
        data: Read-only key-value payload.
        timestamp: UTC time the breadcrumb was recorded.
    """

    message: str
    category: str | None = None
    type: str = "default"
    level: BreadcrumbLevel = BreadcrumbLevel.INFO
    data: Mapping[str, str] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    def to_dict(self) -> dict[str, Any]:
        """Serialize for delivery."""
        return {
            "message": self.message,
            "category": self.category,
            "type": self.type,
            "level": self.level.value,
            "data": dict(self.data),
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class Attachment:
    """A file delivered with an event.

    Attributes:
        filename: Name shown in the backend.
        content: Raw bytes.
        content_type: MIME type.
    """

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass
class RequestInfo:
    """The inbound request an event happened in.

    Populated by framework integrations; read by RequestEnricher and
    redacted by the Scrubber before delivery.
    """

    method: str | None = None
    url: str | None = None
    query_string: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    cookies: dict[str, str] = field(default_factory=dict)
    body: Any = None
    content_type: str | None = None
    content_length: int | None = None
    user_agent: str | None = None
    status_code: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for delivery, omitting unset fields."""
        result: dict[str, Any] = {
            "method": self.method,
            "url": self.url,
            "query_string": self.query_string,
            "headers": dict(self.headers),
            "cookies": dict(self.cookies),
            "data": self.body,
            "content_type": self.content_type,
            "content_length": self.content_length,
            "status_code": self.status_code,
        }
        return {k: v for k, v in result.items() if v not in (None, {}, "")}
