# enginetdms/io/primitives.py
"""
Little-endian value readers over a binary file handle.

Every reader takes the same positioning arguments as ``file.seek``:
`offset` and `whence` (os.SEEK_SET / os.SEEK_CUR / os.SEEK_END). The
default ``(0, SEEK_CUR)`` reads at the current position. Each call advances
the handle by exactly the bytes it consumed.
"""
from __future__ import annotations

import os
import struct
from datetime import datetime, timedelta, timezone
from typing import BinaryIO

import numpy as np

from enginetdms.core.exceptions import InvalidTimestamp, Truncated

# Seconds between 1904-01-01 (LabVIEW epoch) and 1970-01-01 (Unix epoch).
LABVIEW_EPOCH_OFFSET = 2_082_844_800

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_UINT32 = struct.Struct("<I")
_INT32 = struct.Struct("<i")
_UINT64 = struct.Struct("<Q")
_INT64 = struct.Struct("<q")
_SGL = struct.Struct("<f")
_DBL = struct.Struct("<d")
_TIMESTAMP = struct.Struct("<Qq")


def read_exact(fh: BinaryIO, size: int, offset: int = 0, whence: int = os.SEEK_CUR) -> bytes:
    """Read exactly `size` bytes or raise Truncated."""
    fh.seek(offset, whence)
    start = fh.tell()
    data = fh.read(size)
    if len(data) != size:
        raise Truncated(f"Expected {size} bytes but only {len(data)} remain", start)
    return data


def read_uint32(fh: BinaryIO, offset: int = 0, whence: int = os.SEEK_CUR) -> int:
    return _UINT32.unpack(read_exact(fh, 4, offset, whence))[0]


def read_int32(fh: BinaryIO, offset: int = 0, whence: int = os.SEEK_CUR) -> int:
    return _INT32.unpack(read_exact(fh, 4, offset, whence))[0]


def read_uint64(fh: BinaryIO, offset: int = 0, whence: int = os.SEEK_CUR) -> int:
    return _UINT64.unpack(read_exact(fh, 8, offset, whence))[0]


def read_int64(fh: BinaryIO, offset: int = 0, whence: int = os.SEEK_CUR) -> int:
    return _INT64.unpack(read_exact(fh, 8, offset, whence))[0]


def read_sgl(fh: BinaryIO, offset: int = 0, whence: int = os.SEEK_CUR) -> float:
    return _SGL.unpack(read_exact(fh, 4, offset, whence))[0]


def read_dbl(fh: BinaryIO, offset: int = 0, whence: int = os.SEEK_CUR) -> float:
    return _DBL.unpack(read_exact(fh, 8, offset, whence))[0]


def read_string(fh: BinaryIO, offset: int = 0, whence: int = os.SEEK_CUR) -> str:
    """Read a u32 byte count followed by that many UTF-8 bytes."""
    length = read_uint32(fh, offset, whence)
    # Invalid sequences are replaced rather than rejected.
    return read_exact(fh, length).decode("utf-8", errors="replace")


def labview_to_datetime(seconds: int, fraction: int, position: int | None = None) -> datetime:
    """
    Convert a LabVIEW timestamp to an aware UTC datetime.

    seconds:
        signed whole seconds since 1904-01-01 00:00:00 UTC
    fraction:
        unsigned binary fraction of a second (units of 2**-64 s)
    position:
        file offset of the timestamp, reported if it is out of range

    An all-zero timestamp is treated as unset and maps to the Unix epoch.
    """
    if seconds == 0 and fraction == 0:
        return UNIX_EPOCH
    micros = (fraction * 1_000_000) >> 64
    try:
        return UNIX_EPOCH + timedelta(seconds=seconds - LABVIEW_EPOCH_OFFSET, microseconds=micros)
    except OverflowError:
        raise InvalidTimestamp(
            f"Timestamp of {seconds} s since 1904 is outside the supported date range", position
        ) from None


def read_timestamp(fh: BinaryIO, offset: int = 0, whence: int = os.SEEK_CUR) -> datetime:
    fh.seek(offset, whence)
    start = fh.tell()
    fraction, seconds = _TIMESTAMP.unpack(read_exact(fh, 16))
    return labview_to_datetime(seconds, fraction, start)


def labview_to_datetime64(raw: np.ndarray) -> np.ndarray:
    """
    Vectorized conversion of a ('fraction', 'seconds') structured array to
    datetime64[ns], with the same zero-guard as `labview_to_datetime`.
    """
    seconds = raw["seconds"].astype(np.int64)
    fraction = raw["fraction"].astype(np.uint64)
    # (fraction >> 32) * 1e9 fits in 62 bits
    nanos = (((fraction >> np.uint64(32)) * np.uint64(1_000_000_000)) >> np.uint64(32)).astype(np.int64)
    total = (seconds - LABVIEW_EPOCH_OFFSET) * 1_000_000_000 + nanos
    total = np.where((seconds == 0) & (fraction == 0), 0, total)
    return total.astype("datetime64[ns]")


def read_array(
    fh: BinaryIO,
    dtype: np.dtype | str,
    count: int,
    offset: int = 0,
    whence: int = os.SEEK_CUR,
) -> np.ndarray:
    """Read `count` consecutive values of `dtype` into a 1D array."""
    dt = np.dtype(dtype)
    data = read_exact(fh, dt.itemsize * count, offset, whence)
    return np.frombuffer(data, dtype=dt, count=count)


def read_uint32_array(fh: BinaryIO, count: int, offset: int = 0, whence: int = os.SEEK_CUR) -> np.ndarray:
    return read_array(fh, "<u4", count, offset, whence)


def read_uint64_array(fh: BinaryIO, count: int, offset: int = 0, whence: int = os.SEEK_CUR) -> np.ndarray:
    return read_array(fh, "<u8", count, offset, whence)


def read_sgl_array(fh: BinaryIO, count: int, offset: int = 0, whence: int = os.SEEK_CUR) -> np.ndarray:
    return read_array(fh, "<f4", count, offset, whence)


def read_dbl_array(fh: BinaryIO, count: int, offset: int = 0, whence: int = os.SEEK_CUR) -> np.ndarray:
    return read_array(fh, "<f8", count, offset, whence)
