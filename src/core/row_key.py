"""
Row keys for the wide-column store.

Keys are ``<device_id>#<inverted millis>``. The millisecond timestamp is taken as an
unsigned 64-bit integer and all of its bits are flipped, so newer rows of a device
get smaller numbers and sort first within the device prefix, and fresh writes do not
all land on the tail of the key space.

Any consumer that reads these rows relies on the exact numeral, so the complement is
always computed over 64 bits (pre-epoch times wrap the same way a uint64 cast does).
"""
from datetime import datetime, timedelta, timezone

KEY_SEPARATOR = "#"

_UINT64_MASK = (1 << 64) - 1
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MILLI = timedelta(milliseconds=1)


def unix_millis(ts: datetime) -> int:
    """Milliseconds since the Unix epoch, floored. Naive datetimes are treated as UTC."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return (ts - _EPOCH) // _ONE_MILLI


def reverse_millis(ts: datetime) -> int:
    """Bitwise complement of the timestamp's millis, as an unsigned 64-bit value"""
    return ~(unix_millis(ts) & _UINT64_MASK) & _UINT64_MASK


def device_prefix(device_id: str) -> str:
    """Prefix shared by every row key of a device"""
    if not device_id:
        raise ValueError("device_id must not be empty")
    if KEY_SEPARATOR in device_id:
        raise ValueError(f"device_id must not contain {KEY_SEPARATOR!r}: {device_id!r}")
    return f"{device_id}{KEY_SEPARATOR}"


def row_key(device_id: str, ts: datetime) -> str:
    """Build the row key for a reading of ``device_id`` taken at ``ts``"""
    return f"{device_prefix(device_id)}{reverse_millis(ts)}"
