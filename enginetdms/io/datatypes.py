# enginetdms/io/datatypes.py
from __future__ import annotations

from enum import IntEnum, IntFlag

import numpy as np


class TdsDataType(IntEnum):
    """Type tags used by raw data indexes and properties."""

    VOID = 0
    INT8 = 1
    INT16 = 2
    INT32 = 3
    INT64 = 4
    UINT8 = 5
    UINT16 = 6
    UINT32 = 7
    UINT64 = 8
    SGL = 9
    DBL = 10
    EXT = 11
    SGL_WITH_UNIT = 0x19
    DBL_WITH_UNIT = 0x1A
    EXT_WITH_UNIT = 0x1B
    STRING = 0x20
    BOOLEAN = 0x21
    TIMESTAMP = 0x44
    COMPLEX_SGL = 0x08000C
    COMPLEX_DBL = 0x10000D
    DAQMX = 0xFFFFFFFF

    @classmethod
    def from_code(cls, code: int) -> "TdsDataType | int":
        """Return the enum member for `code`, or the bare int if unknown."""
        try:
            return cls(code)
        except ValueError:
            return code


class ToCFlag(IntFlag):
    """Table-of-contents bits of a segment lead-in."""

    META_DATA = 0x2
    NEW_OBJ_LIST = 0x4
    RAW_DATA = 0x8
    INTERLEAVED_DATA = 0x20
    BIG_ENDIAN = 0x40
    DAQMX_RAW_DATA = 0x80


# Bytes per value in the raw data block. Types missing here (strings, EXT,
# complex, DAQmx) size to zero.
RAW_DATA_SIZES: dict[TdsDataType, int] = {
    TdsDataType.INT8: 1,
    TdsDataType.UINT8: 1,
    TdsDataType.BOOLEAN: 1,
    TdsDataType.INT16: 2,
    TdsDataType.UINT16: 2,
    TdsDataType.INT32: 4,
    TdsDataType.UINT32: 4,
    TdsDataType.SGL: 4,
    TdsDataType.SGL_WITH_UNIT: 4,
    TdsDataType.INT64: 8,
    TdsDataType.UINT64: 8,
    TdsDataType.DBL: 8,
    TdsDataType.DBL_WITH_UNIT: 8,
    TdsDataType.TIMESTAMP: 16,
}

# Raw channel types the channel reader can turn into numpy arrays.
NUMPY_DTYPES: dict[TdsDataType, np.dtype] = {
    TdsDataType.INT8: np.dtype("<i1"),
    TdsDataType.UINT8: np.dtype("<u1"),
    TdsDataType.BOOLEAN: np.dtype("?"),
    TdsDataType.INT16: np.dtype("<i2"),
    TdsDataType.UINT16: np.dtype("<u2"),
    TdsDataType.INT32: np.dtype("<i4"),
    TdsDataType.UINT32: np.dtype("<u4"),
    TdsDataType.SGL: np.dtype("<f4"),
    TdsDataType.SGL_WITH_UNIT: np.dtype("<f4"),
    TdsDataType.INT64: np.dtype("<i8"),
    TdsDataType.UINT64: np.dtype("<u8"),
    TdsDataType.DBL: np.dtype("<f8"),
    TdsDataType.DBL_WITH_UNIT: np.dtype("<f8"),
    TdsDataType.TIMESTAMP: np.dtype([("fraction", "<u8"), ("seconds", "<i8")]),
}


def raw_data_size(data_type: TdsDataType | int) -> int:
    """Per-value byte width of a raw data type (0 when not sized)."""
    return RAW_DATA_SIZES.get(data_type, 0)
