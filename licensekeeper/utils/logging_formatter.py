"""
Log formatter that stamps every record with an ISO-8601 UTC timestamp.
"""

import logging
from datetime import datetime, timezone


class UTCTimestampFormatter(logging.Formatter):
    """Formatter that renders %(asctime)s in UTC regardless of host timezone."""

    def formatTime(self, record, datefmt=None):
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        if datefmt:
            return timestamp.strftime(datefmt)
        return timestamp.isoformat(timespec="milliseconds")
