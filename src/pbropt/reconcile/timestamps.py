"""Timestamp normalization and hour indexing.

Sensor exports and lab sheets write timestamps in two profiles:

- strict ISO with milliseconds and a Zulu marker, ``2024-06-01T05:00:00.000Z``
- the facility locale, ``01.06.2024 07:00:00.000`` (local wall clock)

The locale profile is sometimes written with a truncated fractional part
(``.5`` or ``.25``); that part is right-padded to milliseconds before parsing.

All instants returned here are timezone-aware nanosecond ``pd.Timestamp``
values in UTC; dates pandas cannot hold at that resolution are rejected like
any other bad cell.

Hour buckets are addressed by an integer *hour index* instead of formatted
strings. Buckets start on the local clock's whole hours: epoch milliseconds
are shifted by the sub-hour part of the zone's UTC offset (30 minutes in
``Asia/Kolkata``, zero in whole-hour zones) before dividing by one hour.
"""

import logging
import re
from datetime import datetime

import pandas as pd
from pandas.errors import OutOfBoundsDatetime

from pbropt.contracts.failure import InvalidTimestamp

__all__ = [
    'HOUR_MS',
    'normalize_timestamp',
    'try_normalize_timestamp',
    'epoch_ms',
    'hour_phase_ms',
    'hour_index',
    'nearest_hour_index',
    'hour_from_index',
    'is_whole_local_hour',
    'format_local_timestamp',
    'format_hour_key',
]

logger = logging.getLogger(__name__)

HOUR_MS = 3_600_000

ISO_UTC_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")
LOCALE_PATTERN = re.compile(
    r"^(\d{2})\.(\d{2})\.(\d{4}) (\d{2}):(\d{2}):(\d{2})\.(\d{3})$"
)
SHORT_FRACTION = re.compile(r"(\.\d{1,2})$")

LOCALE_FORMAT = "%d.%m.%Y %H:%M:%S"
HOUR_KEY_FORMAT = "%Y-%m-%d %H:%M:%S"


def normalize_timestamp(value, tz: str) -> pd.Timestamp:
    """Parse one timestamp cell into a UTC instant.

    Parameters
    ----------
    value : str, datetime or pd.Timestamp
        Raw cell value. Naive datetimes are taken as local wall clock in ``tz``.
    tz : str
        IANA zone of the facility's local clock.

    Returns
    -------
    pd.Timestamp
        Timezone-aware instant in UTC.

    Raises
    ------
    InvalidTimestamp
        If neither the ISO nor the locale profile matches, the local time
        does not exist (or is ambiguous) in ``tz``, or the date lies outside
        the nanosecond range pandas can represent (about 1677 to 2262).
    """
    if isinstance(value, (pd.Timestamp, datetime)):
        ts = pd.Timestamp(value)
        if ts is pd.NaT:
            raise InvalidTimestamp(value, "not a time")
        if ts.tzinfo is None:
            ts = _localize(ts, tz, value)
        return _as_utc_ns(ts, value)

    if not isinstance(value, str):
        raise InvalidTimestamp(value, f"unsupported cell type {type(value).__name__}")

    text = value.strip()
    if not text:
        raise InvalidTimestamp(value, "empty cell")

    if ISO_UTC_PATTERN.match(text):
        try:
            ts = pd.Timestamp(text)
        except ValueError as e:
            raise InvalidTimestamp(value, str(e)) from e
        return _as_utc_ns(ts, value)

    text = SHORT_FRACTION.sub(lambda m: m.group(1).ljust(4, "0"), text)
    match = LOCALE_PATTERN.match(text)
    if match is None:
        raise InvalidTimestamp(value)

    day, month, year, hour, minute, second, millis = (int(g) for g in match.groups())
    try:
        naive = pd.Timestamp(datetime(year, month, day, hour, minute, second, millis * 1000))
    except ValueError as e:
        raise InvalidTimestamp(value, str(e)) from e

    return _as_utc_ns(_localize(naive, tz, value), value)


def try_normalize_timestamp(value, tz: str, context: str = "row"):
    """Like normalize_timestamp, but log and return None on failure.

    Row-local timestamp failures never abort reconciliation; the row is
    simply left out.
    """
    try:
        return normalize_timestamp(value, tz)
    except InvalidTimestamp as e:
        logger.warning("Dropping %s: %s", context, e)
        return None


def _localize(ts: pd.Timestamp, tz: str, raw) -> pd.Timestamp:
    # DST gaps and repeated hours have no single instant
    try:
        localized = ts.tz_localize(tz, ambiguous="NaT", nonexistent="NaT")
    except (OutOfBoundsDatetime, OverflowError) as e:
        raise InvalidTimestamp(raw, "outside the representable date range") from e
    if localized is pd.NaT:
        raise InvalidTimestamp(raw, f"not a unique local time in {tz}")
    return localized


def _as_utc_ns(ts: pd.Timestamp, raw) -> pd.Timestamp:
    # pandas keeps far dates at coarser units; epoch arithmetic needs ns
    try:
        return ts.tz_convert("UTC").as_unit("ns")
    except (OutOfBoundsDatetime, OverflowError) as e:
        raise InvalidTimestamp(raw, "outside the representable date range") from e


# ============================================================================
# HOUR INDEXING
# ============================================================================

def epoch_ms(ts: pd.Timestamp) -> int:
    """Milliseconds since the Unix epoch (floor)."""
    return ts.as_unit("ns").value // 1_000_000


def hour_phase_ms(ms: float, tz: str = "UTC") -> int:
    """Sub-hour part of the UTC offset of ``tz`` at an epoch-millisecond instant."""
    local = pd.Timestamp(int(ms), unit="ms", tz="UTC").tz_convert(tz)
    offset_ms = int(local.utcoffset().total_seconds() * 1000)
    return offset_ms % HOUR_MS


def hour_index(ts: pd.Timestamp, tz: str = "UTC") -> int:
    """Local-hour bucket containing ``ts`` (floor)."""
    ms = epoch_ms(ts)
    return (ms + hour_phase_ms(ms, tz)) // HOUR_MS


def nearest_hour_index(ms: float, tz: str = "UTC") -> int:
    """Local-hour bucket nearest to an epoch-millisecond value; halves round up."""
    shifted = ms + hour_phase_ms(ms, tz)
    return int((shifted + HOUR_MS / 2) // HOUR_MS)


def hour_from_index(index: int, tz: str = "UTC") -> pd.Timestamp:
    """Instant at which local-hour bucket ``index`` starts."""
    ms = index * HOUR_MS
    return pd.Timestamp(ms - hour_phase_ms(ms, tz), unit="ms", tz="UTC")


def is_whole_local_hour(ts: pd.Timestamp, tz: str) -> bool:
    """True if the local wall clock reads exactly HH:00:00.000."""
    local = ts.tz_convert(tz)
    return (local.minute == 0 and local.second == 0
            and local.microsecond == 0 and local.nanosecond == 0)


# ============================================================================
# FORMATTING
# ============================================================================

def format_local_timestamp(ts: pd.Timestamp, tz: str) -> str:
    """Render ``dd.MM.yyyy HH:mm:ss.SSS`` on the local wall clock."""
    local = ts.tz_convert(tz)
    return f"{local.strftime(LOCALE_FORMAT)}.{local.microsecond // 1000:03d}"


def format_hour_key(ts: pd.Timestamp, tz: str) -> str:
    """Render ``YYYY-MM-DD HH:mm:ss`` on the local wall clock, no zone marker."""
    return ts.tz_convert(tz).strftime(HOUR_KEY_FORMAT)
