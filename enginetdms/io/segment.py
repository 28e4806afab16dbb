# enginetdms/io/segment.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import BinaryIO

from enginetdms.core.exceptions import ChunkSizeMismatch
from .datatypes import ToCFlag
from .lead_in import read_lead_in
from .metadata_reader import (
    EMPTY_METADATA,
    ObjectMap,
    PropertyMap,
    SegmentMetadata,
    read_metadata,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Segment:
    """
    One decoded 'TDSm' segment.

    objects / object_order describe the layout in effect for this segment
    (possibly inherited from earlier ones); properties holds only what this
    segment itself declares.
    """
    position: int
    toc_mask: ToCFlag
    version: int
    next_segment_offset: int
    raw_data_offset: int
    num_chunks: int
    objects: ObjectMap
    object_order: tuple[str, ...]
    properties: PropertyMap
    index: int = 1

    @property
    def metadata(self) -> SegmentMetadata:
        return SegmentMetadata(
            objects=self.objects,
            object_order=self.object_order,
            properties=self.properties,
        )

    @property
    def chunk_size(self) -> int:
        return chunk_size(self.objects)

    @property
    def raw_data_size(self) -> int:
        return self.next_segment_offset - self.raw_data_offset

    @property
    def interleaved(self) -> bool:
        return bool(self.toc_mask & ToCFlag.INTERLEAVED_DATA)


def chunk_size(objects: ObjectMap) -> int:
    """Bytes of one chunk: every object with data, one after another."""
    return sum(obj.index.raw_data_size for obj in objects.values() if obj.has_data)


def calculate_chunks(objects: ObjectMap, next_segment_offset: int, raw_data_offset: int) -> int:
    """Number of whole chunks in the raw data span of a segment."""
    data_size = chunk_size(objects)
    total_size = next_segment_offset - raw_data_offset
    logger.debug("Chunk size %d, raw data span %d", data_size, total_size)

    if total_size < 0:
        raise ChunkSizeMismatch(
            f"Raw data starts after the segment end ({next_segment_offset})", raw_data_offset
        )
    if data_size == 0:
        # Writers sometimes set kTocRawData with nothing behind it.
        if total_size != 0:
            raise ChunkSizeMismatch(
                f"Zero channel data size but {total_size} bytes of raw data", raw_data_offset
            )
        return 0

    num_chunks, remainder = divmod(total_size, data_size)
    if remainder:
        raise ChunkSizeMismatch(
            f"Raw data span {total_size} is not a multiple of chunk size {data_size}",
            raw_data_offset,
        )
    return num_chunks


def read_segment(
    fh: BinaryIO,
    offset: int = 0,
    whence: int = os.SEEK_SET,
    previous: SegmentMetadata = EMPTY_METADATA,
    cumulative: ObjectMap | None = None,
    index: int = 1,
) -> Segment:
    """Read the lead-in and metadata of one segment and size its raw data."""
    lead_in = read_lead_in(fh, offset, whence)
    logger.debug("Reading segment %d at %d", index, lead_in.position)

    meta = read_metadata(fh, lead_in, previous, cumulative)
    num_chunks = calculate_chunks(meta.objects, lead_in.next_segment_offset, lead_in.raw_data_offset)

    return Segment(
        position=lead_in.position,
        toc_mask=lead_in.toc_mask,
        version=lead_in.version,
        next_segment_offset=lead_in.next_segment_offset,
        raw_data_offset=lead_in.raw_data_offset,
        num_chunks=num_chunks,
        objects=meta.objects,
        object_order=meta.object_order,
        properties=meta.properties,
        index=index,
    )
