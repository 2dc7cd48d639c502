"""
Tests for licensekeeper/utils/logging_formatter.py module.
"""

import logging

from licensekeeper.utils.logging_formatter import UTCTimestampFormatter


def _record(created):
    record = logging.LogRecord(
        name="licensekeeper.test",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg="Test message",
        args=(),
        exc_info=None,
    )
    record.created = created
    return record


class TestUTCTimestampFormatter:
    """Test UTCTimestampFormatter class."""

    def test_iso_utc_timestamp(self):
        """Test the default timestamp is ISO-8601 in UTC."""
        formatter = UTCTimestampFormatter("%(asctime)s %(message)s")

        output = formatter.format(_record(1_700_000_000.25))

        assert output == "2023-11-14T22:13:20.250+00:00 Test message"

    def test_custom_date_format(self):
        """Test datefmt is applied to the UTC time."""
        formatter = UTCTimestampFormatter("%(asctime)s", "%Y-%m-%d %H:%M")

        assert formatter.format(_record(1_700_000_000)) == "2023-11-14 22:13"
