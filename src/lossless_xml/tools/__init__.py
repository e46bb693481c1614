"""Developer tools for lossless XML processing."""

from .profiling import RoundTripProfile, RoundTripProfiler, StagePerformance

__all__ = ["RoundTripProfile", "RoundTripProfiler", "StagePerformance"]
