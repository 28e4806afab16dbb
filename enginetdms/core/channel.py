# enginetdms/core/channel.py
from __future__ import annotations

from dataclasses import dataclass, field, replace

import numpy as np

from .exceptions import InvalidChannel
from .metadata import ChannelMeta
from .timeseries import LazyTimeSeries, TimeSeries, Waveform


@dataclass(frozen=True, slots=True)
class Channel:
    """
    One TDMS channel: its data series and the metadata of its object path.

    Unit, path and properties never need the data, so they are safe to use
    on a lazily loaded channel without reading it.
    """

    name: str
    series: TimeSeries | LazyTimeSeries
    meta: ChannelMeta = field(default_factory=ChannelMeta)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidChannel("Channel.name must be a non-empty string.")
        if not isinstance(self.series, (TimeSeries, LazyTimeSeries)):
            raise InvalidChannel(f"Channel {self.name!r}: series must be a TimeSeries or LazyTimeSeries.")
        if not isinstance(self.meta, ChannelMeta):
            raise InvalidChannel(f"Channel {self.name!r}: meta must be a ChannelMeta instance.")

    @property
    def unit(self) -> str | None:
        return self.meta.unit if self.meta.unit is not None else self.series.unit

    @property
    def path(self) -> str | None:
        return self.meta.path

    @property
    def data_type(self) -> str | None:
        return self.meta.data_type

    @property
    def properties(self) -> dict[str, str]:
        return self.meta.properties

    @property
    def waveform(self) -> Waveform | None:
        return self.series.waveform

    @property
    def sample_rate(self) -> float | None:
        return self.series.sample_rate

    @property
    def time(self) -> np.ndarray:
        return self.series.time

    @property
    def values(self) -> np.ndarray:
        return self.series.values

    @property
    def n(self) -> int:
        return self.series.n

    @property
    def t_start(self) -> float | None:
        return self.series.t_start

    @property
    def t_end(self) -> float | None:
        return self.series.t_end

    def slice_time(
        self,
        t_min: float | None = None,
        t_max: float | None = None,
        *,
        closed: str = "both",
    ) -> "Channel":
        return replace(self, series=self.series.slice_time(t_min, t_max, closed=closed))

    def to_numpy(self, *, copy: bool = False) -> tuple[np.ndarray, np.ndarray]:
        return self.series.to_numpy(copy=copy)
