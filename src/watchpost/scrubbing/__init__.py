"""Sensitive-data scrubbing."""

from watchpost.scrubbing.scrubber import Scrubber

__all__ = ["Scrubber"]
