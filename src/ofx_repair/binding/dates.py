"""Parsing of OFX date strings.

OFX dates look like ``YYYYMMDD``, ``YYYYMMDDHHMMSS`` or
``YYYYMMDDHHMMSS.XXX[-5:EST]``. The bracketed offset is in hours and may be
fractional.
"""

import re
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional

from ofx_repair.shared.errors import DateParseError

_DATE_PATTERN = re.compile(
    r"(?P<year>\d{4})(?P<month>\d{2})(?P<day>\d{2})"
    r"(?:(?P<hour>\d{2})(?P<minute>\d{2})(?P<second>\d{2})?(?:\.(?P<millis>\d{3}))?)?"
    r"(?:\[(?P<offset>[-+]?\d+(?:\.\d+)?)(?::(?P<tz>[^\]\s]+))?\])?"
)


def parse_date(value: str, default_tz: Optional[tzinfo] = None) -> datetime:
    """Parse an OFX date string into an aware datetime.

    Args:
        value: OFX formatted date
        default_tz: Timezone used when the string carries no offset
            (UTC when omitted)

    Returns:
        Timezone-aware datetime

    Raises:
        DateParseError: If the string is not an OFX date

    Examples:
        >>> parse_date("20180313093000.000[-10:EDT]").isoformat()
        '2018-03-13T09:30:00-10:00'
    """
    match = _DATE_PATTERN.match(value.strip())
    if not match:
        raise DateParseError("date string can not be parsed")

    tz = default_tz or timezone.utc
    if match["offset"]:
        try:
            offset = timedelta(hours=float(match["offset"]))
            tz = timezone(offset, match["tz"]) if match["tz"] else timezone(offset)
        except ValueError as e:
            raise DateParseError("date tz offset can not be parsed") from e

    try:
        return datetime(
            int(match["year"]),
            int(match["month"]),
            int(match["day"]),
            int(match["hour"] or 0),
            int(match["minute"] or 0),
            int(match["second"] or 0),
            int(match["millis"] or 0) * 1000,
            tzinfo=tz,
        )
    except ValueError as e:
        raise DateParseError("date string can not be parsed") from e
