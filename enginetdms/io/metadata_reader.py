# enginetdms/io/metadata_reader.py
"""
Reconstruction of a segment's object table from its metadata block.

A segment's metadata is incremental: it may list only the objects whose
layout or properties changed, rely on the previous segment's object list,
or carry no metadata at all. `read_metadata` turns the bytes of one
segment plus the state left by earlier segments into a new immutable
`SegmentMetadata` snapshot. Inputs are never mutated.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import BinaryIO, Mapping

from enginetdms.core.exceptions import UnknownObjectReference
from .datatypes import ToCFlag
from .lead_in import LEAD_IN_SIZE, LeadIn
from .primitives import read_string, read_uint32
from .properties import Property, read_property
from .raw_index import (
    EMPTY_INDEX,
    HeaderKind,
    IndexHeader,
    SegmentObject,
    read_index_header,
    read_raw_data_index,
)

logger = logging.getLogger(__name__)

ObjectMap = Mapping[str, SegmentObject]
PropertyMap = Mapping[str, Mapping[str, Property]]


def _empty_mapping() -> Mapping:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class SegmentMetadata:
    """Objects, object order and properties in effect for one segment."""

    objects: ObjectMap = field(default_factory=_empty_mapping)
    object_order: tuple[str, ...] = ()
    properties: PropertyMap = field(default_factory=_empty_mapping)


EMPTY_METADATA = SegmentMetadata()


def _resolve(fh: BinaryIO, header: IndexHeader, existing: SegmentObject) -> SegmentObject:
    """Apply a header to an object that already has a known layout."""
    if header.kind is HeaderKind.NO_DATA:
        # No data this time, but keep type/size for a later "matches previous".
        return SegmentObject(header, existing.index) if existing.has_data else existing
    if header.kind is HeaderKind.MATCHES_PREVIOUS:
        return existing if existing.has_data else SegmentObject(header, existing.index)
    return SegmentObject(header, read_raw_data_index(fh, header))


def read_metadata(
    fh: BinaryIO,
    lead_in: LeadIn,
    previous: SegmentMetadata = EMPTY_METADATA,
    cumulative: ObjectMap | None = None,
) -> SegmentMetadata:
    """
    Build the metadata snapshot of the segment described by `lead_in`.

    previous:
        snapshot of the immediately preceding segment
    cumulative:
        latest SegmentObject of every path seen in any earlier segment
    """
    if not lead_in.has(ToCFlag.META_DATA):
        logger.debug("Segment at %d has no metadata, reusing previous", lead_in.position)
        return previous

    if cumulative is None:
        cumulative = {}

    if lead_in.has(ToCFlag.NEW_OBJ_LIST) or not previous.objects:
        objects: dict[str, SegmentObject] = {}
        order: list[str] = []
    else:
        objects = dict(previous.objects)
        order = list(previous.object_order)
    properties: dict[str, dict[str, Property]] = {}

    fh.seek(lead_in.position + LEAD_IN_SIZE)
    num_objects = read_uint32(fh)
    logger.debug("Segment at %d declares %d objects", lead_in.position, num_objects)

    for i in range(num_objects):
        path = read_string(fh)
        header_position = fh.tell()
        header = read_index_header(fh)
        logger.debug("Object %d %s header=%s", i, path, header.kind.value)

        if path in objects:
            objects[path] = _resolve(fh, header, objects[path])
        elif path in cumulative:
            objects[path] = _resolve(fh, header, cumulative[path])
            order.append(path)
        else:
            if header.kind is HeaderKind.MATCHES_PREVIOUS:
                raise UnknownObjectReference(
                    f"Object {path} matches previous segment but was never seen before",
                    header_position,
                )
            if header.kind is HeaderKind.NO_DATA:
                objects[path] = SegmentObject(header, EMPTY_INDEX)
            else:
                objects[path] = SegmentObject(header, read_raw_data_index(fh, header))
            order.append(path)

        num_properties = read_uint32(fh)
        for _ in range(num_properties):
            prop = read_property(fh)
            properties.setdefault(path, {})[prop.name] = prop

    end = fh.tell()
    if end != lead_in.raw_data_offset:
        logger.warning(
            "Metadata of segment at %d ended at %d, lead-in declares raw data at %d",
            lead_in.position, end, lead_in.raw_data_offset,
        )

    return SegmentMetadata(
        objects=MappingProxyType(objects),
        object_order=tuple(order),
        properties=MappingProxyType(
            {path: MappingProxyType(props) for path, props in properties.items()}
        ),
    )
