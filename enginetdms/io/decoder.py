# enginetdms/io/decoder.py
from __future__ import annotations

import logging
import os
from typing import BinaryIO, Iterable

from .lead_in import file_size
from .metadata_reader import EMPTY_METADATA, ObjectMap
from .properties import Property
from .segment import Segment, read_segment

logger = logging.getLogger(__name__)

MergedProperties = dict[str, dict[str, Property]]


def read_all_segments(fh: BinaryIO) -> list[Segment]:
    """
    Walk the file from byte 0 and decode every segment in order.

    Each segment is decoded against the previous segment's snapshot and a
    cumulative map holding the latest layout of every object seen so far.
    """
    size = file_size(fh)
    segments: list[Segment] = []
    previous = EMPTY_METADATA
    cumulative: ObjectMap = {}
    position = 0

    while position < size:
        segment = read_segment(
            fh,
            position,
            os.SEEK_SET,
            previous=previous,
            cumulative=cumulative,
            index=len(segments) + 1,
        )
        segments.append(segment)
        previous = segment.metadata
        cumulative = {**cumulative, **segment.objects}
        position = segment.next_segment_offset

    logger.debug("Finished reading %d TDMS segments", len(segments))
    return segments


def merge_properties(segments: Iterable[Segment]) -> MergedProperties:
    """Fold per-segment properties in segment order; later values win."""
    merged: MergedProperties = {}
    for segment in segments:
        for path, props in segment.properties.items():
            merged.setdefault(path, {}).update(props)
    return merged


def decode(fh: BinaryIO) -> tuple[list[Segment], MergedProperties]:
    """Decode a TDMS file into its segments and the merged property table."""
    segments = read_all_segments(fh)
    return segments, merge_properties(segments)
