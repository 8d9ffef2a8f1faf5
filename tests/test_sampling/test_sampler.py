"""Tests for transaction sampling decisions."""

import pytest

from watchpost.errors import InvalidInputError
from watchpost.sampling.sampler import Sampler, SamplingContext, inherit_parent


def _context(parent_sampled: bool | None = None) -> SamplingContext:
    return SamplingContext(
        transaction_name="GET /orders",
        operation="http.server",
        parent_sampled=parent_sampled,
    )


class TestResolve:
    """Test effective rate resolution."""

    def test_sampler_returning_none_falls_back_to_static_rate(self) -> None:
        """Test that a callback returning None yields the static rate."""
        sampler = Sampler(0.25, traces_sampler=lambda ctx: None)
        assert sampler.resolve(_context()) == 0.25

    def test_dynamic_rate_wins_even_when_zero(self) -> None:
        """Test that a dynamic 0.0 overrides a non-zero static rate."""
        sampler = Sampler(1.0, traces_sampler=lambda ctx: 0.0)
        assert sampler.resolve(_context()) == 0.0

    def test_no_callback_uses_static_rate(self) -> None:
        """Test that the static rate applies without a callback."""
        assert Sampler(0.5).resolve(_context()) == 0.5

    def test_callback_sees_context(self) -> None:
        """Test that the callback receives the transaction details."""
        seen: list[SamplingContext] = []

        def sampler_fn(ctx: SamplingContext) -> float | None:
            seen.append(ctx)
            return 1.0 if ctx.transaction_name.startswith("POST") else None

        sampler = Sampler(0.1, traces_sampler=sampler_fn)
        assert sampler.resolve(_context()) == 0.1
        assert seen[0].operation == "http.server"

    def test_out_of_range_dynamic_rate_is_rejected(self) -> None:
        """Test that a callback returning a rate above 1 is a programmer error."""
        sampler = Sampler(0.5, traces_sampler=lambda ctx: 1.5)
        with pytest.raises(InvalidInputError):
            sampler.resolve(_context())

    def test_out_of_range_static_rate_is_rejected(self) -> None:
        """Test that an invalid static rate is rejected at construction."""
        with pytest.raises(InvalidInputError):
            Sampler(-0.1)


class TestShouldSample:
    """Test drawing a decision against the rate."""

    def test_rate_zero_never_samples(self) -> None:
        """Test that rate 0 never samples, whatever the draw."""
        assert Sampler(0.0, rng=lambda: 0.0).should_sample(_context()) is False

    def test_rate_one_always_samples(self) -> None:
        """Test that rate 1 always samples, whatever the draw."""
        assert Sampler(1.0, rng=lambda: 0.999).should_sample(_context()) is True

    def test_draw_is_compared_against_rate(self) -> None:
        """Test that the draw decides between 0 and 1."""
        assert Sampler(0.25, rng=lambda: 0.2).should_sample(_context()) is True
        assert Sampler(0.25, rng=lambda: 0.3).should_sample(_context()) is False


class TestInheritParent:
    """Test the parent-consistent sampling helper."""

    def test_root_has_no_opinion(self) -> None:
        """Test that a root transaction yields None."""
        assert inherit_parent(_context()) is None
        assert _context().is_root

    def test_follows_parent_decision(self) -> None:
        """Test that a child follows its parent's decision."""
        assert inherit_parent(_context(parent_sampled=True)) == 1.0
        assert inherit_parent(_context(parent_sampled=False)) == 0.0
        assert not _context(parent_sampled=True).is_root
