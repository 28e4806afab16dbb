# enginetdms/io/lead_in.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import BinaryIO

from enginetdms.core.exceptions import BadTag, UnsupportedTdmsFeature
from .datatypes import ToCFlag
from .primitives import read_exact, read_uint32, read_uint64

logger = logging.getLogger(__name__)

SEGMENT_TAG = b"TDSm"
LEAD_IN_SIZE = 28
INCOMPLETE_SEGMENT = 0xFFFFFFFFFFFFFFFF


@dataclass(frozen=True, slots=True)
class LeadIn:
    """The fixed 28-byte header at the start of every segment."""

    position: int
    toc_mask: ToCFlag
    version: int
    segment_length: int
    metadata_length: int
    next_segment_offset: int
    raw_data_offset: int

    @property
    def incomplete(self) -> bool:
        return self.segment_length == INCOMPLETE_SEGMENT

    def has(self, flag: ToCFlag) -> bool:
        return bool(self.toc_mask & flag)


def file_size(fh: BinaryIO) -> int:
    """Size of the file behind `fh`; the current position is preserved."""
    here = fh.tell()
    size = fh.seek(0, os.SEEK_END)
    fh.seek(here, os.SEEK_SET)
    return size


def read_lead_in(fh: BinaryIO, offset: int = 0, whence: int = os.SEEK_CUR) -> LeadIn:
    """
    Read a segment lead-in and derive the segment's absolute offsets.

    Leaves `fh` positioned right after the 28 lead-in bytes, at the start
    of the metadata block (or of the raw data when there is no metadata).
    """
    fh.seek(offset, whence)
    start = fh.tell()

    tag = read_exact(fh, 4)
    if tag != SEGMENT_TAG:
        raise BadTag(f"Segment tag is {tag!r}, expected {SEGMENT_TAG!r}", start)

    toc_mask = ToCFlag(read_uint32(fh))
    version = read_uint32(fh)
    segment_length = read_uint64(fh)
    metadata_length = read_uint64(fh)

    logger.debug("Lead-in at %d: toc=%r version=%d", start, toc_mask, version)
    for flag in ToCFlag:
        if toc_mask & flag:
            logger.debug("Segment at %d contains %s", start, flag.name)

    if toc_mask & ToCFlag.BIG_ENDIAN:
        raise UnsupportedTdmsFeature(
            f"Big-endian segment at byte offset {start} is not supported"
        )

    if segment_length == INCOMPLETE_SEGMENT:
        # Writer never finalized this segment; it runs to end of file.
        next_segment_offset = file_size(fh)
        logger.warning("Incomplete segment at %d, reading up to end of file (%d)", start, next_segment_offset)
    else:
        next_segment_offset = start + LEAD_IN_SIZE + segment_length

    return LeadIn(
        position=start,
        toc_mask=toc_mask,
        version=version,
        segment_length=segment_length,
        metadata_length=metadata_length,
        next_segment_offset=next_segment_offset,
        raw_data_offset=start + LEAD_IN_SIZE + metadata_length,
    )
