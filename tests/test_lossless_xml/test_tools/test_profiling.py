"""Tests for round-trip profiling."""

from unittest.mock import Mock, patch

from lossless_xml.shared import ParserConfig
from lossless_xml.tools import RoundTripProfiler

DOCUMENT = "<map>\n    <t/>\n    <t/>\n</map>\n"


class TestRoundTripProfiler:
    """Test stage measurements."""

    def test_stages_and_identity(self):
        """Test each stage is measured and identity detected."""
        profile = RoundTripProfiler(enable_memory_tracking=False).profile(DOCUMENT)

        assert [stage.stage_name for stage in profile.stages] == [
            "tokenize",
            "build",
            "serialize",
        ]
        assert profile.stage("tokenize").operations_count == 4
        assert profile.stage("build").operations_count == 3
        assert profile.identical is True
        assert profile.input_size == profile.output_size == len(DOCUMENT)
        assert profile.root["map"]["ts"][1].reference_count == 2
        assert profile.peak_memory_bytes == 0

    def test_difference_detected(self):
        """Test output differing from input is reported."""
        profile = RoundTripProfiler(enable_memory_tracking=False).profile("<a><b/></a>")
        assert profile.identical is False

    def test_memory_sampling(self):
        """Test resident memory is sampled around every stage."""
        samples = [100, 150, 150, 400, 400, 420]
        with patch("lossless_xml.tools.profiling.psutil.Process") as process_class:
            process_class.return_value.memory_info.side_effect = [
                Mock(rss=value) for value in samples
            ]
            profile = RoundTripProfiler().profile(DOCUMENT)

        deltas = [stage.memory_delta for stage in profile.stages]
        assert deltas == [50, 250, 20]
        assert profile.peak_memory_bytes == 420

    def test_config_used(self):
        """Test the profiler honours the configuration."""
        profiler = RoundTripProfiler(ParserConfig.compact(), enable_memory_tracking=False)
        profile = profiler.profile("<a>\n  <b/>\n</a>\n")

        assert profile.identical is True

    def test_to_dict(self):
        """Test the JSON-friendly summary."""
        data = RoundTripProfiler(enable_memory_tracking=False).profile(DOCUMENT).to_dict()

        assert data["identical"] is True
        assert [stage["stage"] for stage in data["stages"]] == [
            "tokenize",
            "build",
            "serialize",
        ]
        assert "total_duration_ms" in data
