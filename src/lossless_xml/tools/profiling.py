"""Stage-level profiling of a parse and serialize round trip.

Measures wall time and resident memory (via psutil) for the tokenize, build
and serialize stages separately, which is what the ``stats`` CLI command
reports.
"""

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

import psutil

from lossless_xml.shared import ParserConfig, get_logger
from lossless_xml.tokenization import TagTokenizer
from lossless_xml.tree import XMLNode, XMLSerializer, XMLTreeBuilder


@dataclass
class StagePerformance:
    """Performance metrics for one pipeline stage."""

    stage_name: str
    start_time: float
    end_time: float = 0.0
    memory_start: int = 0  # bytes
    memory_end: int = 0  # bytes
    operations_count: int = 0

    @property
    def duration_ms(self) -> float:
        """Processing duration in milliseconds."""
        return (self.end_time - self.start_time) * 1000

    @property
    def memory_delta(self) -> int:
        """Memory usage change in bytes."""
        return self.memory_end - self.memory_start

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage_name,
            "duration_ms": self.duration_ms,
            "memory_delta_bytes": self.memory_delta,
            "operations": self.operations_count,
        }


@dataclass
class RoundTripProfile:
    """Measurements of one round trip."""

    input_size: int
    stages: List[StagePerformance] = field(default_factory=list)
    output_size: int = 0
    identical: bool = False
    root: Optional[XMLNode] = None

    @property
    def total_duration_ms(self) -> float:
        """Sum of stage durations in milliseconds."""
        return sum(stage.duration_ms for stage in self.stages)

    @property
    def peak_memory_bytes(self) -> int:
        """Highest resident set size observed at a stage boundary."""
        return max(
            (max(stage.memory_start, stage.memory_end) for stage in self.stages),
            default=0,
        )

    def stage(self, name: str) -> Optional[StagePerformance]:
        """Find stage measurements by name."""
        for stage in self.stages:
            if stage.stage_name == name:
                return stage
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "input_size": self.input_size,
            "output_size": self.output_size,
            "identical": self.identical,
            "total_duration_ms": self.total_duration_ms,
            "peak_memory_bytes": self.peak_memory_bytes,
            "stages": [stage.to_dict() for stage in self.stages],
        }


class RoundTripProfiler:
    """Profiler running each pipeline stage under measurement.

    Examples:
        >>> profile = RoundTripProfiler().profile("<a/>\\n")
        >>> [stage.stage_name for stage in profile.stages]
        ['tokenize', 'build', 'serialize']
        >>> profile.identical
        True
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        enable_memory_tracking: bool = True,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the profiler.

        Args:
            config: Parser configuration used for every stage
            enable_memory_tracking: Whether to sample resident memory
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or ParserConfig()
        self.enable_memory_tracking = enable_memory_tracking
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "roundtrip_profiler")
        self._process = psutil.Process() if enable_memory_tracking else None

    def _rss(self) -> int:
        return self._process.memory_info().rss if self._process else 0

    @contextmanager
    def measure(self, profile: RoundTripProfile, stage_name: str) -> Iterator[StagePerformance]:
        """Record one stage into ``profile`` for the duration of the block."""
        stage = StagePerformance(
            stage_name=stage_name,
            start_time=time.time(),
            memory_start=self._rss(),
        )
        try:
            yield stage
        finally:
            stage.end_time = time.time()
            stage.memory_end = self._rss()
            profile.stages.append(stage)

    def profile(self, text: str) -> RoundTripProfile:
        """Tokenize, build and serialize ``text`` and report each stage."""
        profile = RoundTripProfile(input_size=len(text))

        with self.measure(profile, "tokenize") as stage:
            tags = TagTokenizer(self.config.tokenizer, self.correlation_id).tokenize(text)
            stage.operations_count = len(tags)

        with self.measure(profile, "build") as stage:
            builder = XMLTreeBuilder(
                self.config.tree,
                self.correlation_id,
                enable_diagnostics=self.config.global_.enable_diagnostics,
            )
            root = builder.build(tags)
            stage.operations_count = builder.performance.nodes_built

        with self.measure(profile, "serialize") as stage:
            output = XMLSerializer(
                self.config.serializer, self.config.tree, self.correlation_id
            ).serialize(root)
            stage.operations_count = len(output)

        profile.root = root
        profile.output_size = len(output)
        profile.identical = output == text

        self.logger.info(
            "Round trip profiled",
            extra={
                "input_size": profile.input_size,
                "total_duration_ms": profile.total_duration_ms,
                "identical": profile.identical,
            }
        )
        return profile
