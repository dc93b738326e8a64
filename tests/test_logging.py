"""
Tests for logging utilities.
"""

import logging
from unittest.mock import patch

from sayabot.utils.logging import get_logger, logger, RequestLogCollector


class TestGetLogger:
    """Tests for the application logger."""

    def test_singleton(self):
        """
        Tests get_logger:
        - Returns a logging.Logger named saya_bot
        - Returns the same instance on every call
        - Matches the module-level logger alias
        """
        first = get_logger()
        assert isinstance(first, logging.Logger)
        assert first.name == "saya_bot"
        assert get_logger() is first
        assert logger is first


class TestRequestLogCollector:
    """Tests for the per-request audit trail."""

    def test_tag(self):
        """The tag identifies the requester."""
        collector = RequestLogCollector(42)
        assert collector.tag == "verify:42"
        assert collector.logs == []

    def test_entries_recorded_with_level(self):
        """
        Tests entry formatting:
        - Each call appends one entry
        - Entries carry the level and the tag
        """
        collector = RequestLogCollector(42)
        collector.info("opened")
        collector.warning("dm failed")
        collector.error("grant failed")

        assert len(collector.logs) == 3
        assert "INFO" in collector.logs[0] and "[verify:42] opened" in collector.logs[0]
        assert "WARNING" in collector.logs[1]
        assert "ERROR" in collector.logs[2]

    def test_mirrored_to_main_logger(self):
        """Entries are mirrored to the main logger at the matching level."""
        collector = RequestLogCollector(7)
        with patch("sayabot.utils.logging.logger") as mock_logger:
            collector.info("hello")
            collector.warning("careful")

        mock_logger.info.assert_called_once_with("[verify:7] hello")
        mock_logger.warning.assert_called_once_with("[verify:7] careful")
