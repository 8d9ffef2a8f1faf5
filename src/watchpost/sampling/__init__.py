"""Transaction sampling."""

from watchpost.sampling.sampler import Sampler, SamplingContext, TracesSampler, inherit_parent

__all__ = ["Sampler", "SamplingContext", "TracesSampler", "inherit_parent"]
