"""Transaction sampling decisions.

A configured dynamic sampler callback wins outright: whatever it returns is
used verbatim, including 0.0 and rates inherited from the parent. Only when
it returns None (or none is configured) does the static rate apply.

Root versus child transactions are distinguished solely by whether the
context carries a parent-sampled flag. A service that receives an incoming
sampled trace should sample its own root at 1.0 to avoid gaps in the trace,
which is what :func:`inherit_parent` returns.
"""

import random
from dataclasses import dataclass, field
from typing import Any, Callable

from watchpost.config.validators import validate_rate
from watchpost.errors import InvalidInputError

TracesSampler = Callable[["SamplingContext"], float | None]


@dataclass(frozen=True)
class SamplingContext:
    """Input to a sampling decision.

    Attributes:
        transaction_name: Name of the transaction being started.
        operation: Operation of the transaction (e.g. "http.server").
        parent_sampled: Upstream decision, None for a root transaction.
        custom_data: Arbitrary data supplied by the caller.
    """

    transaction_name: str
    operation: str
    parent_sampled: bool | None = None
    custom_data: dict[str, Any] = field(default_factory=dict)

    @property
    def is_root(self) -> bool:
        """Whether the transaction has no upstream parent."""
        return self.parent_sampled is None


def inherit_parent(context: SamplingContext) -> float | None:
    """Rate that keeps a child consistent with its parent's decision.

    Args:
        context: Sampling context.

    Returns:
        1.0 if the parent was sampled, 0.0 if not, None for a root.
    """
    if context.parent_sampled is None:
        return None
    return 1.0 if context.parent_sampled else 0.0


class Sampler:
    """Resolves the effective sample rate for new transactions.

    Args:
        static_rate: Rate used when no dynamic decision is made.
        traces_sampler: Optional callback returning a rate or None.
        rng: Random source returning floats in [0, 1), injectable for tests.
    """

    def __init__(
        self,
        static_rate: float,
        traces_sampler: TracesSampler | None = None,
        rng: Callable[[], float] = random.random,
    ) -> None:  # noqa: D107
        try:
            self._static_rate = validate_rate(static_rate)
        except ValueError as e:
            raise InvalidInputError(str(e)) from None
        self._traces_sampler = traces_sampler
        self._rng = rng

    @property
    def static_rate(self) -> float:
        """The static fallback rate."""
        return self._static_rate

    def resolve(self, context: SamplingContext) -> float:
        """Resolve the effective rate for a transaction.

        Args:
            context: Sampling context.

        Returns:
            The dynamic sampler's rate if it returned one, else the static rate.

        Raises:
            InvalidInputError: If the dynamic sampler returns a rate outside [0, 1].
        """
        if self._traces_sampler is not None:
            rate = self._traces_sampler(context)
            if rate is not None:
                try:
                    return validate_rate(rate, "traces_sampler result")
                except ValueError as e:
                    raise InvalidInputError(str(e)) from None
        return self._static_rate

    def should_sample(self, context: SamplingContext) -> bool:
        """Draw a sampling decision against the resolved rate."""
        rate = self.resolve(context)
        if rate <= 0.0:
            return False
        if rate >= 1.0:
            return True
        return self._rng() < rate
