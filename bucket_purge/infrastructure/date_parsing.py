from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from bucket_purge.domain.errors import DateParseError

# Formats that carry a numeric offset or none at all. Naive results are UTC.
_NUMERIC_FORMATS = (
    "%Y-%m-%dT%H:%M:%S%z",  # RFC 3339
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%a, %d %b %Y %H:%M:%S %z",  # RFC 1123Z
    "%Y-%m-%dT%H:%M:%S.%f%z",  # RFC 3339 with fractional seconds
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S.%f",
)

# Formats that end in a zone abbreviation, matched with the abbreviation removed.
_ABBREVIATED_FORMATS = (
    "%d %b %y %H:%M",  # RFC 822
    "%A, %d-%b-%y %H:%M:%S",  # RFC 850
    "%a, %d %b %Y %H:%M:%S",  # RFC 1123
)

_ZONE_OFFSETS = {
    "UTC": 0,
    "UT": 0,
    "GMT": 0,
    "Z": 0,
    "EST": -5,
    "EDT": -4,
    "CST": -6,
    "CDT": -5,
    "MST": -7,
    "MDT": -6,
    "PST": -8,
    "PDT": -7,
}

_TRAILING_ZONE = re.compile(r"^(?P<body>.*\S)\s+(?P<zone>[A-Za-z]{1,5})$")
_FRACTION = re.compile(r"\.(\d+)")


def _trim_fraction(value: str) -> str:
    # strptime's %f accepts at most microsecond precision.
    return _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)


def _with_utc_default(parsed: datetime) -> datetime:
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_cutoff(value: str) -> datetime:
    """Parse a cutoff date in one of the supported layouts.

    The result is always timezone-aware. Unknown zone abbreviations are read
    as UTC.
    """
    text = (value or "").strip()
    if not text:
        raise DateParseError("unable to parse date: empty value")

    candidate = _trim_fraction(text)
    for fmt in _NUMERIC_FORMATS:
        try:
            return _with_utc_default(datetime.strptime(candidate, fmt))
        except ValueError:
            continue

    match = _TRAILING_ZONE.match(text)
    if match:
        body = match.group("body")
        offset = _ZONE_OFFSETS.get(match.group("zone").upper(), 0)
        for fmt in _ABBREVIATED_FORMATS:
            try:
                parsed = datetime.strptime(body, fmt)
            except ValueError:
                continue
            return parsed.replace(tzinfo=timezone(timedelta(hours=offset)))

    raise DateParseError(f"unable to parse date: {value}")
