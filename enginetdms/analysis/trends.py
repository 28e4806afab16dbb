# enginetdms/analysis/trends.py
from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from enginetdms.config import settings
from enginetdms.io.tdms_reader import TdmsReader


def _as_float_array(y) -> np.ndarray:
    arr = np.asarray(y, dtype=np.float64)
    if arr.ndim != 1:
        raise ValueError(f"expected a 1D sequence, got shape {arr.shape}")
    if arr.size == 0:
        raise ValueError("expected a non-empty sequence")
    return arr


def rms(y) -> float:
    """Root mean square."""
    arr = _as_float_array(y)
    return float(np.sqrt(np.mean(arr * arr)))


def peak_to_peak(y) -> float:
    arr = _as_float_array(y)
    return float(np.ptp(arr))


def crest_factor(y) -> float:
    """Peak absolute value over RMS (nan for an all-zero signal)."""
    arr = _as_float_array(y)
    r = rms(arr)
    if r == 0.0:
        return float("nan")
    return float(np.max(np.abs(arr)) / r)


def vib_fft(y, dt: float, averages: int | None = None) -> tuple[np.ndarray, np.ndarray]:
    """
    Hann-windowed one-sided FFT magnitude spectrum.

    averages:
        0 -> one FFT over the whole signal
        N -> split into N equal blocks and average their magnitudes
        None -> settings.fft_averages

    Returns (frequencies in Hz, magnitudes).
    """
    arr = _as_float_array(y)
    if averages is None:
        averages = settings.fft_averages
    if averages < 0:
        raise ValueError("averages must be >= 0")

    if averages > 0:
        block = arr.size // averages
        if block == 0:
            raise ValueError(f"signal of {arr.size} samples is too short for {averages} averages")
        blocks = arr[: block * averages].reshape(averages, block)
    else:
        block = arr.size
        blocks = arr.reshape(1, block)

    window = np.hanning(block)
    mags = np.abs(np.fft.rfft(blocks * window, axis=1)).mean(axis=0)
    freqs = np.fft.rfftfreq(block, d=dt)
    return freqs, mags


@dataclass(frozen=True)
class SegmentTrend:
    """Summary statistics of one channel over one TDMS segment."""

    segment_index: int
    n: int
    rms: float
    peak_to_peak: float
    crest_factor: float


def channel_trends(reader: TdmsReader, path: str) -> list[SegmentTrend]:
    """RMS / peak-to-peak / crest factor of a channel, segment by segment."""
    info = reader.channel(path)
    trends: list[SegmentTrend] = []
    with open(reader.path, "rb") as fh:
        for seg in info.segments:
            values = seg.load(fh)
            if values.size == 0:
                continue
            trends.append(
                SegmentTrend(
                    segment_index=seg.segment_index,
                    n=int(values.size),
                    rms=rms(values),
                    peak_to_peak=peak_to_peak(values),
                    crest_factor=crest_factor(values),
                )
            )
    return trends
