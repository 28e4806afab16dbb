# test/test_primitives.py
import io
import os
import struct
from datetime import datetime, timezone

import numpy as np
import pytest

from enginetdms.core import InvalidTimestamp, Truncated
from enginetdms.io.primitives import (
    LABVIEW_EPOCH_OFFSET,
    UNIX_EPOCH,
    labview_to_datetime,
    labview_to_datetime64,
    read_dbl,
    read_dbl_array,
    read_int32,
    read_int64,
    read_sgl,
    read_sgl_array,
    read_string,
    read_timestamp,
    read_uint32,
    read_uint32_array,
    read_uint64,
    read_uint64_array,
)


def test_read_uint32_little_endian():
    assert read_uint32(io.BytesIO(b"\x01\x00\x00\x00")) == 1


def test_read_dbl_one():
    assert read_dbl(io.BytesIO(struct.pack("<d", 1.0))) == 1.0


def test_signed_and_wide_integers():
    fh = io.BytesIO(struct.pack("<iqQ", -5, -7, 2**63 + 1))
    assert read_int32(fh) == -5
    assert read_int64(fh) == -7
    assert read_uint64(fh) == 2**63 + 1
    assert fh.tell() == 20


def test_read_sgl():
    assert read_sgl(io.BytesIO(struct.pack("<f", 0.5))) == 0.5


def test_seek_origin_selectors():
    data = b"\xaa\xbb" + struct.pack("<I", 7) + struct.pack("<I", 9)
    fh = io.BytesIO(data)

    assert read_uint32(fh, 2, os.SEEK_SET) == 7
    assert read_uint32(fh, -4, os.SEEK_END) == 9
    fh.seek(0)
    assert read_uint32(fh, 2, os.SEEK_CUR) == 7


def test_read_string_utf8():
    enc = "héllo".encode("utf-8")
    fh = io.BytesIO(struct.pack("<I", len(enc)) + enc)
    assert read_string(fh) == "héllo"
    assert fh.tell() == 4 + len(enc)


def test_read_string_invalid_utf8_is_replaced():
    fh = io.BytesIO(struct.pack("<I", 2) + b"a\xff")
    assert read_string(fh) == "a\ufffd"


def test_short_read_raises_truncated_with_offset():
    fh = io.BytesIO(b"\x00\x00\x01\x02")
    fh.seek(2)
    with pytest.raises(Truncated) as exc:
        read_uint64(fh)
    assert exc.value.offset == 2


def test_truncated_string_body():
    fh = io.BytesIO(struct.pack("<I", 10) + b"abc")
    with pytest.raises(Truncated):
        read_string(fh)


def test_zero_timestamp_is_unix_epoch():
    fh = io.BytesIO(b"\x00" * 16)
    assert read_timestamp(fh) == datetime(1970, 1, 1, tzinfo=timezone.utc)


def test_timestamp_conversion_uses_exact_epoch_offset():
    fh = io.BytesIO(struct.pack("<Qq", 2**63, LABVIEW_EPOCH_OFFSET + 10))
    ts = read_timestamp(fh)
    assert ts == datetime(1970, 1, 1, 0, 0, 10, 500000, tzinfo=timezone.utc)


def test_timestamp_before_unix_epoch():
    ts = labview_to_datetime(LABVIEW_EPOCH_OFFSET - 60, 0)
    assert ts == datetime(1969, 12, 31, 23, 59, tzinfo=timezone.utc)


def test_whole_second_timestamp_is_not_treated_as_unset():
    ts = labview_to_datetime(LABVIEW_EPOCH_OFFSET + 1, 0)
    assert ts == datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)
    assert labview_to_datetime(0, 0) == UNIX_EPOCH


def test_out_of_range_timestamp_reports_its_offset():
    fh = io.BytesIO(b"\x00" * 5 + struct.pack("<Qq", 0, -2**63))
    with pytest.raises(InvalidTimestamp) as exc:
        read_timestamp(fh, 5, os.SEEK_SET)
    assert exc.value.offset == 5
    assert fh.tell() == 21


def test_vectorized_timestamps():
    raw = np.array(
        [(0, 0), (2**63, LABVIEW_EPOCH_OFFSET + 10)],
        dtype=[("fraction", "<u8"), ("seconds", "<i8")],
    )
    out = labview_to_datetime64(raw)
    assert out.dtype == np.dtype("datetime64[ns]")
    assert out[0] == np.datetime64("1970-01-01T00:00:00", "ns")
    assert out[1] == np.datetime64("1970-01-01T00:00:10.500000000", "ns")


def test_bulk_array_reads():
    fh = io.BytesIO(struct.pack("<3d", 1.0, 2.0, 3.0) + struct.pack("<2f", 0.5, 1.5))
    assert np.array_equal(read_dbl_array(fh, 3), [1.0, 2.0, 3.0])
    assert np.array_equal(read_sgl_array(fh, 2), [0.5, 1.5])

    fh = io.BytesIO(struct.pack("<2I", 1, 2) + struct.pack("<2Q", 3, 4))
    assert read_uint32_array(fh, 2).tolist() == [1, 2]
    assert read_uint64_array(fh, 2).tolist() == [3, 4]


def test_bulk_array_short_read():
    fh = io.BytesIO(struct.pack("<2d", 1.0, 2.0))
    with pytest.raises(Truncated):
        read_dbl_array(fh, 3)
