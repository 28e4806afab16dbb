# enginetdms/core/timeseries.py
"""
Channel data as loaded from a TDMS file.

A series pairs a relative time track with the channel's values. Waveform
channels also carry their `Waveform` timing (the wf_* properties), so the
sample rate and absolute sample times survive slicing.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable

import numpy as np

from .exceptions import InvalidTimeSeries

Loader = Callable[[], tuple[np.ndarray, np.ndarray]]

# closed -> (lower bound inclusive, upper bound inclusive)
_CLOSED = {
    "both": (True, True),
    "left": (True, False),
    "right": (False, True),
    "neither": (False, False),
}


def window_mask(
    t: np.ndarray,
    t_min: float | None = None,
    t_max: float | None = None,
    closed: str = "both",
) -> np.ndarray:
    """Boolean mask of the samples of `t` that fall inside the window."""
    try:
        lower_inclusive, upper_inclusive = _CLOSED[closed]
    except KeyError:
        raise ValueError(f"closed must be one of {', '.join(_CLOSED)}, got {closed!r}") from None

    mask = np.ones(t.shape, dtype=bool)
    if t_min is not None:
        mask &= (t >= t_min) if lower_inclusive else (t > t_min)
    if t_max is not None:
        mask &= (t <= t_max) if upper_inclusive else (t < t_max)
    return mask


@dataclass(frozen=True)
class Waveform:
    """Timing of a waveform channel, read back from its wf_* properties."""

    increment: float
    start_offset: float = 0.0
    start_time: datetime | None = None
    samples: int | None = None

    @property
    def sample_rate(self) -> float:
        """Samples per second, inf when the increment is 0."""
        if self.increment == 0:
            return math.inf
        return 1.0 / self.increment

    def time_track(self, n: int) -> np.ndarray:
        return self.start_offset + np.arange(n, dtype=np.float64) * self.increment


def _checked_arrays(time, values) -> tuple[np.ndarray, np.ndarray]:
    t = np.asarray(time)
    v = np.asarray(values)
    if t.ndim != 1 or v.ndim != 1:
        raise InvalidTimeSeries(f"time and values must be 1D, got shapes {t.shape} and {v.shape}")
    if t.size != v.size:
        raise InvalidTimeSeries(f"{t.size} time points for {v.size} values")
    if t.size:
        if not np.isfinite(t).all():
            raise InvalidTimeSeries("time track contains NaN or Inf")
        if (np.diff(t) < 0).any():
            raise InvalidTimeSeries("time track goes backwards")
    return t, v


@dataclass(frozen=True, slots=True)
class TimeSeries:
    """
    Values of one channel against its time track.

    `time` is in seconds from the waveform start (wf_start_offset +
    i * wf_increment), or the sample index for channels without timing.
    Timestamp channels keep their values as datetime64[ns].
    """

    time: np.ndarray = field(repr=False)
    values: np.ndarray = field(repr=False)
    unit: str | None = None
    name: str | None = None
    waveform: Waveform | None = None

    def __post_init__(self) -> None:
        t, v = _checked_arrays(self.time, self.values)
        if self.waveform is not None and not isinstance(self.waveform, Waveform):
            raise InvalidTimeSeries(f"waveform must be a Waveform, got {type(self.waveform).__name__}")
        object.__setattr__(self, "time", t)
        object.__setattr__(self, "values", v)

    @property
    def n(self) -> int:
        return int(self.time.size)

    @property
    def t_start(self) -> float | None:
        return float(self.time[0]) if self.n else None

    @property
    def t_end(self) -> float | None:
        return float(self.time[-1]) if self.n else None

    @property
    def sample_rate(self) -> float | None:
        return None if self.waveform is None else self.waveform.sample_rate

    def absolute_time(self) -> np.ndarray:
        """
        Sample times as UTC datetime64[ns]: wf_start_time plus `time` seconds.

        Raises InvalidTimeSeries for a series without a waveform start time.
        """
        if self.waveform is None or self.waveform.start_time is None:
            raise InvalidTimeSeries(f"{self.name or 'series'} has no wf_start_time")
        start = np.datetime64(self.waveform.start_time.replace(tzinfo=None), "ns")
        offsets = np.round(self.time.astype(np.float64) * 1e9).astype(np.int64)
        return start + offsets.astype("timedelta64[ns]")

    def slice_time(
        self,
        t_min: float | None = None,
        t_max: float | None = None,
        *,
        closed: str = "both",
    ) -> "TimeSeries":
        mask = window_mask(self.time, t_min, t_max, closed)
        return replace(self, time=self.time[mask], values=self.values[mask])

    def to_numpy(self, *, copy: bool = False) -> tuple[np.ndarray, np.ndarray]:
        if copy:
            return self.time.copy(), self.values.copy()
        return self.time, self.values


@dataclass(slots=True)
class LazyTimeSeries:
    """
    Channel data read through `loader` on first access, then cached.

    unit, name and waveform come from channel properties, so they and the
    sample rate are available without reading any values.
    """

    loader: Loader = field(repr=False)
    unit: str | None = None
    name: str | None = None
    waveform: Waveform | None = None
    _series: TimeSeries | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if not callable(self.loader):
            raise InvalidTimeSeries("LazyTimeSeries.loader must be callable.")

    @property
    def loaded(self) -> bool:
        return self._series is not None

    def materialize(self) -> TimeSeries:
        if self._series is None:
            t, v = self.loader()
            self._series = TimeSeries(t, v, unit=self.unit, name=self.name, waveform=self.waveform)
        return self._series

    @property
    def time(self) -> np.ndarray:
        return self.materialize().time

    @property
    def values(self) -> np.ndarray:
        return self.materialize().values

    @property
    def n(self) -> int:
        return self.materialize().n

    @property
    def t_start(self) -> float | None:
        return self.materialize().t_start

    @property
    def t_end(self) -> float | None:
        return self.materialize().t_end

    @property
    def sample_rate(self) -> float | None:
        return None if self.waveform is None else self.waveform.sample_rate

    def absolute_time(self) -> np.ndarray:
        return self.materialize().absolute_time()

    def slice_time(
        self,
        t_min: float | None = None,
        t_max: float | None = None,
        *,
        closed: str = "both",
    ) -> TimeSeries:
        return self.materialize().slice_time(t_min, t_max, closed=closed)

    def to_numpy(self, *, copy: bool = False) -> tuple[np.ndarray, np.ndarray]:
        return self.materialize().to_numpy(copy=copy)
