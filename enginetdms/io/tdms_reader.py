from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from typing import BinaryIO, Iterable, List, Mapping, Protocol

import numpy as np

from enginetdms.config import settings
from enginetdms.core.exceptions import ChannelNotFound, GroupNotFound, UnsupportedTdmsFeature
from enginetdms.core.timeseries import Waveform, window_mask
from .datatypes import NUMPY_DTYPES, TdsDataType
from .decoder import decode
from .primitives import labview_to_datetime64, read_array
from .properties import Property, read_property_value
from .segment import Segment

logger = logging.getLogger(__name__)


_COMPONENT_RE = re.compile(r"'((?:[^']|'')*)'")


def split_path(path: str) -> tuple[str, ...]:
    """Split an object path into its unquoted components.

    Examples
    --------
    "/"                  -> ()
    "/'Group'"           -> ("Group",)
    "/'Group'/'Ch''1'"   -> ("Group", "Ch'1")
    """
    return tuple(m.group(1).replace("''", "'") for m in _COMPONENT_RE.finditer(path))


def build_path(*components: str) -> str:
    """Inverse of split_path."""
    if not components:
        return "/"
    return "".join("/'" + c.replace("'", "''") + "'" for c in components)


def unique_paths(segments: Iterable[Segment]) -> list[str]:
    """Every object path of the file, in first-seen order."""
    seen: dict[str, None] = {}
    for seg in segments:
        for path in seg.object_order:
            seen.setdefault(path, None)
    return list(seen)


def group_paths(paths: Iterable[str]) -> list[str]:
    return [p for p in paths if len(split_path(p)) == 1]


def channel_paths(paths: Iterable[str], group: str) -> list[str]:
    out = []
    for p in paths:
        parts = split_path(p)
        if len(parts) == 2 and parts[0] == group:
            out.append(p)
    return out


@dataclass
class RawSegmentInfo:
    """
    Where one channel's values live inside one TDMS segment.

    The channel occupies `num_values` values at `data_offset` in the first
    chunk, and again every `chunk_stride` bytes for `num_chunks` chunks.
    """

    segment_index: int
    data_offset: int
    chunk_stride: int
    num_chunks: int
    num_values: int
    data_type: TdsDataType | int
    interleaved: bool = False

    @property
    def total_values(self) -> int:
        return self.num_values * self.num_chunks

    def load(self, fh: BinaryIO) -> np.ndarray:
        if self.interleaved:
            raise UnsupportedTdmsFeature(
                f"Interleaved raw data in segment {self.segment_index} is not supported"
            )
        dtype = NUMPY_DTYPES.get(self.data_type)  # type: ignore[call-overload]
        if dtype is None:
            raise UnsupportedTdmsFeature(
                f"Reading raw data of type {self.data_type!r} is not supported"
            )
        blocks = [
            read_array(fh, dtype, self.num_values, self.data_offset + k * self.chunk_stride, os.SEEK_SET)
            for k in range(self.num_chunks)
        ]
        values = np.concatenate(blocks) if blocks else np.empty(0, dtype=dtype)
        if self.data_type == TdsDataType.TIMESTAMP:
            return labview_to_datetime64(values)
        return values


@dataclass
class RawChannelInfo:
    """
    Channel view spanning every segment that carries its data.
    """

    path: str
    group: str
    name: str
    data_type: TdsDataType | int
    segments: list[RawSegmentInfo]
    properties: Mapping[str, Property] = field(default_factory=dict)

    @property
    def num_values(self) -> int:
        return sum(seg.total_values for seg in self.segments)

    @property
    def data_type_name(self) -> str:
        if isinstance(self.data_type, TdsDataType):
            return self.data_type.name
        return f"0x{self.data_type:X}"

    def load(self, fh: BinaryIO) -> np.ndarray:
        """Read and concatenate the channel's values from every segment."""
        if not self.segments:
            dtype = NUMPY_DTYPES.get(self.data_type, np.dtype(np.float64))  # type: ignore[call-overload]
            return np.empty(0, dtype=dtype)
        return np.concatenate([seg.load(fh) for seg in self.segments])


@dataclass
class RawChannelData:
    time: "np.ndarray"
    values: "np.ndarray"


class ChannelReader(Protocol):
    """Protocol for TDMS channel readers."""

    def list_channels(self, group: str | None = None) -> List[RawChannelInfo]:
        ...

    def read_channels(
        self,
        channel_names: Iterable[str],
        start_time: float | None = None,
        end_time: float | None = None,
    ) -> dict[str, RawChannelData]:
        ...


class TdmsReader:
    """Channel-level access to a TDMS file.

    The file is decoded once at construction; channel data is read on
    demand, opening the file for the duration of each read.
    """

    def __init__(self, path: str | os.PathLike):
        self.path = os.fspath(path)
        with open(self.path, "rb") as fh:
            self.segments, self.properties = decode(fh)
        self.paths = unique_paths(self.segments)
        self._channels: dict[str, RawChannelInfo] = {}
        self._build_index()
        logger.info(
            "Decoded %s: %d segments, %d channels",
            self.path, len(self.segments), len(self._channels),
        )

    # ------------------------------------------------------------------
    # Index construction
    # ------------------------------------------------------------------
    def _build_index(self) -> None:
        for path in self.paths:
            parts = split_path(path)
            if len(parts) != 2:
                continue
            self._channels[path] = RawChannelInfo(
                path=path,
                group=parts[0],
                name=parts[1],
                data_type=TdsDataType.VOID,
                segments=[],
                properties=self.properties.get(path, {}),
            )

        for seg in self.segments:
            offset = seg.raw_data_offset
            for path in seg.object_order:
                obj = seg.objects[path]
                if not obj.has_data:
                    continue
                info = self._channels.get(path)
                if info is not None and obj.index.num_values and seg.num_chunks:
                    info.data_type = obj.index.data_type
                    info.segments.append(
                        RawSegmentInfo(
                            segment_index=seg.index,
                            data_offset=offset,
                            chunk_stride=seg.chunk_size,
                            num_chunks=seg.num_chunks,
                            num_values=obj.index.num_values,
                            data_type=obj.index.data_type,
                            interleaved=seg.interleaved,
                        )
                    )
                offset += obj.index.raw_data_size

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------
    def list_groups(self) -> list[str]:
        return [split_path(p)[0] for p in group_paths(self.paths)]

    def list_channels(self, group: str | None = None) -> List[RawChannelInfo]:
        """List channels in file order, optionally restricted to one group."""
        if group is None:
            return list(self._channels.values())
        if group not in self.list_groups() and not any(
            info.group == group for info in self._channels.values()
        ):
            raise GroupNotFound(group)
        return [info for info in self._channels.values() if info.group == group]

    def channel(self, path: str) -> RawChannelInfo:
        try:
            return self._channels[path]
        except KeyError as e:
            raise ChannelNotFound(path) from e

    def object_properties(self, path: str) -> Mapping[str, Property]:
        """Merged properties of any object path ('/' for the file)."""
        return self.properties.get(path, {})

    # ------------------------------------------------------------------
    # Data access
    # ------------------------------------------------------------------
    def read_property_values(self, path: str, names: Iterable[str]) -> dict[str, object]:
        """Re-read typed values of properties from their file positions."""
        props = self.object_properties(path)
        out: dict[str, object] = {}
        with open(self.path, "rb") as fh:
            for name in names:
                if name in props:
                    out[name] = read_property_value(fh, props[name])
        return out

    def waveform(self, path: str) -> Waveform | None:
        """Waveform timing of a channel, or None without a positive wf_increment."""
        values = self.read_property_values(
            path, ("wf_increment", "wf_start_offset", "wf_start_time", "wf_samples")
        )
        if "wf_increment" not in values:
            return None
        increment = float(values["wf_increment"])  # type: ignore[arg-type]
        if not increment > 0:
            logger.warning("Ignoring wf_increment=%r of %s; using the sample index", increment, path)
            return None
        return Waveform(
            increment=increment,
            start_offset=float(values.get("wf_start_offset", 0.0)),
            start_time=values.get("wf_start_time"),  # type: ignore[arg-type]
            samples=values.get("wf_samples"),  # type: ignore[arg-type]
        )

    def time_track(self, path: str, n: int) -> np.ndarray:
        wf = self.waveform(path) if settings.waveform_time_track else None
        if wf is None:
            return np.arange(n, dtype=np.float64)
        return wf.time_track(n)

    def read_channel(self, path: str) -> np.ndarray:
        info = self.channel(path)
        with open(self.path, "rb") as fh:
            return info.load(fh)

    def load(self, path: str) -> tuple[np.ndarray, np.ndarray]:
        """(time, values) of one channel."""
        values = self.read_channel(path)
        return self.time_track(path, values.size), values

    def read_channels(
        self,
        channel_names: Iterable[str],
        start_time: float | None = None,
        end_time: float | None = None,
    ) -> dict[str, RawChannelData]:
        """Read multiple channels by object path.

        Parameters
        ----------
        channel_names:
            Iterable of channel paths (e.g. "/'Group'/'Voltage'").
        start_time, end_time:
            Optional time window, in the channel's time track units.
        """
        result: dict[str, RawChannelData] = {}

        for name in channel_names:
            t, v = self.load(name)

            if start_time is not None or end_time is not None:
                mask = window_mask(t, start_time, end_time)
                t = t[mask]
                v = v[mask]

            result[name] = RawChannelData(time=t, values=v)

        return result
