"""Tests for correlation-aware logging."""

import logging
from unittest.mock import patch

from lossless_xml.shared.logging import CorrelationLogger, configure_logging, get_logger


class TestCorrelationLogger:
    """Test logger wrapper behaviour."""

    def test_records_carry_component_and_correlation(self, caplog):
        """Test every record includes component and correlation ID."""
        logger = get_logger("lossless_xml.test", "req-42", "tree_builder")

        with caplog.at_level(logging.DEBUG, logger="lossless_xml.test"):
            logger.debug("Building", extra={"tag_count": 3})

        record = caplog.records[-1]
        assert record.component == "tree_builder"
        assert record.correlation_id == "req-42"
        assert record.tag_count == 3

    def test_component_defaults_to_module_name(self):
        """Test component falls back to the last part of the logger name."""
        logger = CorrelationLogger("lossless_xml.tree.serializer")
        assert logger.component == "serializer"

    def test_error_without_traceback(self, caplog):
        """Test error logging can omit exception info."""
        logger = get_logger("lossless_xml.test", None, "lossless_parser")

        with caplog.at_level(logging.ERROR, logger="lossless_xml.test"):
            logger.error("Parse operation failed", exc_info=False)

        assert not caplog.records[-1].exc_info


class TestConfigureLogging:
    """Test root logging configuration."""

    def test_installs_handler_with_level(self):
        """Test configure_logging passes the level and one formatted handler."""
        with patch("lossless_xml.shared.logging.logging.basicConfig") as basic_config:
            configure_logging("ERROR")

        kwargs = basic_config.call_args.kwargs
        assert kwargs["level"] == logging.ERROR
        assert kwargs["force"] is True
        (handler,) = kwargs["handlers"]
        assert "%(component)s" in handler.formatter._fmt
