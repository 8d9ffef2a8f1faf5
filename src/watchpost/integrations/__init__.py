"""Integrations with other libraries."""

from watchpost.integrations.logging import WatchpostHandler, install

__all__ = ["WatchpostHandler", "install"]
