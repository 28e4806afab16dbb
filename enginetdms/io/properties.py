# enginetdms/io/properties.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Callable, Iterable

from enginetdms.core.exceptions import UnknownPropertyType
from .datatypes import TdsDataType
from .primitives import (
    read_dbl,
    read_int32,
    read_string,
    read_timestamp,
    read_uint32,
    read_uint64,
)

logger = logging.getLogger(__name__)

PropertyValue = str | int | float | datetime


@dataclass(frozen=True, slots=True)
class Property:
    """
    One object property as declared in a segment.

    value_position is the absolute offset of the typed payload, so the
    value can be re-read from the file instead of parsed back from `value`.
    """
    name: str
    data_type: TdsDataType
    value_position: int
    value: str


def _format_timestamp(ts: datetime) -> str:
    return ts.isoformat().replace("+00:00", "Z")


# Property types only; raw data sizing lives in datatypes.RAW_DATA_SIZES.
_PROPERTY_READERS: dict[TdsDataType, tuple[Callable[[BinaryIO], PropertyValue], Callable[..., str]]] = {
    TdsDataType.STRING: (read_string, str),
    TdsDataType.INT32: (read_int32, lambda v: f"{v:d}"),
    TdsDataType.UINT32: (read_uint32, lambda v: f"{v:d}"),
    TdsDataType.UINT64: (read_uint64, lambda v: f"{v:d}"),
    TdsDataType.DBL: (read_dbl, lambda v: f"{v:e}"),
    TdsDataType.TIMESTAMP: (read_timestamp, _format_timestamp),
}


def _reader_for(code: int, position: int):
    try:
        return _PROPERTY_READERS[code]  # type: ignore[index]
    except KeyError:
        raise UnknownPropertyType(
            f"Property data type 0x{code:X} is not supported", position
        ) from None


def read_property(fh: BinaryIO, offset: int = 0, whence: int = os.SEEK_CUR) -> Property:
    """Read name, type tag and value of one property."""
    fh.seek(offset, whence)
    name = read_string(fh)
    type_position = fh.tell()
    code = read_uint32(fh)
    value_position = fh.tell()

    read, render = _reader_for(code, type_position)
    value = render(read(fh))
    logger.debug("Property %r (type 0x%X) = %s", name, code, value)

    return Property(
        name=name,
        data_type=TdsDataType(code),
        value_position=value_position,
        value=value,
    )


def read_property_value(fh: BinaryIO, prop: Property) -> PropertyValue:
    """Re-read the typed value of `prop` from its recorded file position."""
    read, _ = _reader_for(prop.data_type, prop.value_position)
    fh.seek(prop.value_position, os.SEEK_SET)
    return read(fh)


def sorted_properties(props: Iterable[Property]) -> list[Property]:
    """Sort by name, case-insensitively, ties broken by exact name."""
    return sorted(props, key=lambda p: (p.name.lower(), p.name))
