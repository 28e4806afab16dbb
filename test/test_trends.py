# test/test_trends.py
import numpy as np
import pytest

import tdms_bytes as tb
from enginetdms.analysis.trends import (
    SegmentTrend,
    channel_trends,
    crest_factor,
    peak_to_peak,
    rms,
    vib_fft,
)
from enginetdms.config import settings
from enginetdms.io.tdms_reader import TdmsReader

NEW = tb.TOC_META_DATA | tb.TOC_RAW_DATA | tb.TOC_NEW_OBJ_LIST
ACC = "/'Vibration'/'Accel'"


def test_square_wave_statistics():
    y = [1.0, -1.0, 1.0, -1.0]
    assert rms(y) == pytest.approx(1.0)
    assert peak_to_peak(y) == pytest.approx(2.0)
    assert crest_factor(y) == pytest.approx(1.0)


def test_crest_factor_uses_absolute_peak():
    y = np.array([0.0, -3.0, 1.0, 1.0])
    assert crest_factor(y) == pytest.approx(3.0 / rms(y))


def test_crest_factor_of_silence_is_nan():
    assert np.isnan(crest_factor(np.zeros(8)))


def test_metrics_reject_empty_and_2d():
    with pytest.raises(ValueError):
        rms([])
    with pytest.raises(ValueError):
        peak_to_peak(np.zeros((2, 2)))


def test_vib_fft_finds_tone():
    dt = 0.01
    t = np.arange(100) * dt
    y = np.sin(2 * np.pi * 10.0 * t)

    freqs, mags = vib_fft(y, dt, averages=0)
    assert freqs.shape == mags.shape == (51,)
    assert freqs[np.argmax(mags)] == pytest.approx(10.0)


def test_vib_fft_block_averaging():
    dt = 0.01
    t = np.arange(200) * dt
    y = np.sin(2 * np.pi * 10.0 * t)

    freqs, mags = vib_fft(y, dt, averages=4)
    # 50-sample blocks -> 2 Hz resolution
    assert freqs.size == 26
    assert freqs[1] == pytest.approx(2.0)
    assert freqs[np.argmax(mags)] == pytest.approx(10.0)


def test_vib_fft_defaults_to_configured_averages(monkeypatch):
    monkeypatch.setattr(settings, "fft_averages", 2)
    freqs, _ = vib_fft(np.ones(100), 1.0)
    assert freqs.size == 26


def test_vib_fft_rejects_bad_averages():
    with pytest.raises(ValueError):
        vib_fft(np.ones(10), 1.0, averages=-1)
    with pytest.raises(ValueError):
        vib_fft(np.ones(3), 1.0, averages=5)


def test_channel_trends_per_segment(write_tdms):
    data = tb.segment(
        NEW,
        tb.metadata(tb.obj("/'Vibration'", tb.NO_DATA), tb.obj(ACC, tb.raw_index(tb.T_DBL, 4))),
        tb.dbl(1, -1, 1, -1),
    ) + tb.segment(tb.TOC_RAW_DATA, raw=tb.dbl(2, -2, 2, -2, 2, -2, 2, -2))

    trends = channel_trends(TdmsReader(write_tdms(data)), ACC)

    assert [t.segment_index for t in trends] == [1, 2]
    assert all(isinstance(t, SegmentTrend) for t in trends)
    assert trends[0].n == 4
    assert trends[0].rms == pytest.approx(1.0)
    assert trends[1].n == 8
    assert trends[1].rms == pytest.approx(2.0)
    assert trends[1].peak_to_peak == pytest.approx(4.0)
    assert trends[1].crest_factor == pytest.approx(1.0)
