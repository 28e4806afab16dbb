# test/test_segment.py
import io
import struct

import pytest

import tdms_bytes as tb
from enginetdms.core import ChunkSizeMismatch
from enginetdms.io.datatypes import TdsDataType
from enginetdms.io.raw_index import IndexHeader, RawDataIndex, SegmentObject, NO_DATA_HEADER
from enginetdms.io.segment import calculate_chunks, chunk_size, read_segment

EXPLICIT = IndexHeader.from_bytes(struct.pack("<I", 20))
DBL4 = RawDataIndex(TdsDataType.DBL, 1, 4, 32)
I32_2 = RawDataIndex(TdsDataType.INT32, 1, 2, 8)


def test_chunk_count_is_span_over_chunk_size():
    objects = {"a": SegmentObject(EXPLICIT, DBL4), "b": SegmentObject(EXPLICIT, I32_2)}
    assert chunk_size(objects) == 40
    assert calculate_chunks(objects, 1000 + 120, 1000) == 3


def test_objects_without_data_do_not_count():
    objects = {"a": SegmentObject(EXPLICIT, DBL4), "b": SegmentObject(NO_DATA_HEADER, I32_2)}
    assert chunk_size(objects) == 32
    assert calculate_chunks(objects, 64, 0) == 2


def test_zero_chunk_size_requires_empty_span():
    assert calculate_chunks({}, 100, 100) == 0
    with pytest.raises(ChunkSizeMismatch):
        calculate_chunks({}, 108, 100)


def test_partial_chunk_is_fatal():
    objects = {"a": SegmentObject(EXPLICIT, DBL4)}
    with pytest.raises(ChunkSizeMismatch) as exc:
        calculate_chunks(objects, 140, 100)
    assert exc.value.offset == 100


def test_raw_data_after_segment_end_is_fatal():
    with pytest.raises(ChunkSizeMismatch):
        calculate_chunks({}, 90, 100)


def test_read_segment_builds_immutable_segment():
    meta = tb.metadata(tb.obj("/'G'/'Ch1'", tb.raw_index(tb.T_DBL, 4), [tb.prop_dbl("wf_increment", 0.1)]))
    raw = tb.dbl(*range(8))
    data = tb.segment(tb.TOC_META_DATA | tb.TOC_RAW_DATA | tb.TOC_NEW_OBJ_LIST, meta, raw)

    seg = read_segment(io.BytesIO(data))

    assert seg.position == 0
    assert seg.index == 1
    assert seg.num_chunks == 2
    assert seg.chunk_size == 32
    assert seg.raw_data_size == 64
    assert seg.raw_data_offset == 28 + len(meta)
    assert seg.next_segment_offset == len(data)
    assert seg.object_order == ("/'G'/'Ch1'",)
    assert seg.properties["/'G'/'Ch1'"]["wf_increment"].value == "1.000000e-01"
    assert not seg.interleaved

    with pytest.raises(AttributeError):
        seg.num_chunks = 3  # type: ignore[misc]


def test_read_segment_rejects_partial_chunk():
    meta = tb.metadata(tb.obj("/'G'/'Ch1'", tb.raw_index(tb.T_DBL, 4)))
    data = tb.segment(tb.TOC_META_DATA | tb.TOC_RAW_DATA | tb.TOC_NEW_OBJ_LIST, meta, tb.dbl(1, 2, 3))
    with pytest.raises(ChunkSizeMismatch):
        read_segment(io.BytesIO(data))


def test_spurious_raw_data_flag_without_data():
    meta = tb.metadata(tb.obj("/'G'", tb.NO_DATA))
    data = tb.segment(tb.TOC_META_DATA | tb.TOC_RAW_DATA | tb.TOC_NEW_OBJ_LIST, meta)
    assert read_segment(io.BytesIO(data)).num_chunks == 0
