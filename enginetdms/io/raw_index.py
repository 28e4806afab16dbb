# enginetdms/io/raw_index.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO

from enginetdms.core.exceptions import InvalidDimension, UnsupportedTdmsFeature
from .datatypes import TdsDataType, raw_data_size
from .primitives import read_exact, read_uint32, read_uint64

logger = logging.getLogger(__name__)

_NO_RAW_DATA = b"\xff\xff\xff\xff"
_MATCHES_PREVIOUS = b"\x00\x00\x00\x00"
_DAQMX_HEADERS = (
    b"\x69\x12\x00\x00",  # format changing scaler
    b"\x69\x13\x00\x00",  # digital line scaler
)

# Declared index lengths, counting the 4-byte length field.
FIXED_INDEX_LENGTH = 20
VARIABLE_INDEX_LENGTH = 28


class HeaderKind(Enum):
    NO_DATA = "no_data"
    MATCHES_PREVIOUS = "matches_previous"
    EXPLICIT = "explicit"


@dataclass(frozen=True, slots=True)
class IndexHeader:
    """The 4-byte raw data index header of one object, classified once."""

    kind: HeaderKind
    raw: bytes

    @classmethod
    def from_bytes(cls, raw: bytes) -> "IndexHeader":
        if raw == _NO_RAW_DATA:
            return cls(HeaderKind.NO_DATA, raw)
        if raw == _MATCHES_PREVIOUS:
            return cls(HeaderKind.MATCHES_PREVIOUS, raw)
        return cls(HeaderKind.EXPLICIT, raw)

    @property
    def is_daqmx(self) -> bool:
        return self.raw in _DAQMX_HEADERS

    @property
    def index_length(self) -> int:
        """Declared byte length of the explicit index that follows."""
        return int.from_bytes(self.raw, "little")


NO_DATA_HEADER = IndexHeader(HeaderKind.NO_DATA, _NO_RAW_DATA)


@dataclass(frozen=True, slots=True)
class RawDataIndex:
    """
    On-disk layout of one object's data for a single chunk.

    raw_data_size = element size x dimension x num_values
    """
    data_type: TdsDataType | int = TdsDataType.VOID
    dimension: int = 0
    num_values: int = 0
    raw_data_size: int = 0


EMPTY_INDEX = RawDataIndex()


@dataclass(frozen=True, slots=True)
class SegmentObject:
    """Raw data index header as read, paired with the effective index."""

    header: IndexHeader
    index: RawDataIndex = EMPTY_INDEX

    @property
    def has_data(self) -> bool:
        return self.header.kind is not HeaderKind.NO_DATA


def read_index_header(fh: BinaryIO, offset: int = 0, whence: int = os.SEEK_CUR) -> IndexHeader:
    return IndexHeader.from_bytes(read_exact(fh, 4, offset, whence))


def read_raw_data_index(
    fh: BinaryIO,
    header: IndexHeader,
    offset: int = 0,
    whence: int = os.SEEK_CUR,
) -> RawDataIndex:
    """
    Read the explicit raw data index that follows an EXPLICIT header.

    Layout: u32 data type, u32 array dimension (must be 1), u64 value count.
    A 28-byte index (variable-length data such as strings) carries one more
    u64: the total byte size of the values, which is used as raw_data_size.
    """
    fh.seek(offset, whence)
    start = fh.tell()
    if header.is_daqmx:
        raise UnsupportedTdmsFeature(
            f"DAQmx raw data index at byte offset {start} is not supported"
        )
    if header.index_length not in (FIXED_INDEX_LENGTH, VARIABLE_INDEX_LENGTH):
        raise UnsupportedTdmsFeature(
            f"Raw data index of length {header.index_length} at byte offset {start} is not supported"
        )

    code = read_uint32(fh)
    data_type = TdsDataType.from_code(code)
    dimension = read_uint32(fh)
    if dimension != 1:
        raise InvalidDimension(f"Array dimension is {dimension}, expected 1", start + 4)
    num_values = read_uint64(fh)

    if header.index_length == VARIABLE_INDEX_LENGTH:
        size = read_uint64(fh)
    else:
        width = raw_data_size(data_type)
        if width == 0:
            logger.debug("Raw data type %r has no fixed size; sized as 0", data_type)
        size = width * dimension * num_values

    logger.debug(
        "Raw data index: type=%r dimension=%d values=%d size=%d (index length %d)",
        data_type, dimension, num_values, size, header.index_length,
    )
    return RawDataIndex(
        data_type=data_type,
        dimension=dimension,
        num_values=num_values,
        raw_data_size=size,
    )
