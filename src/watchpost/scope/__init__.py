"""Scope: mutable per-capture context and its data types."""

from watchpost.scope.models import (
    Attachment,
    Breadcrumb,
    BreadcrumbLevel,
    RequestInfo,
    SeverityLevel,
    User,
)
from watchpost.scope.scope import DEFAULT_MAX_BREADCRUMBS, Scope, ScopeStack

__all__ = [
    "Scope",
    "ScopeStack",
    "DEFAULT_MAX_BREADCRUMBS",
    "Attachment",
    "Breadcrumb",
    "BreadcrumbLevel",
    "RequestInfo",
    "SeverityLevel",
    "User",
]
