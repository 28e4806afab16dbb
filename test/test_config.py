# test/test_config.py
import logging

import numpy as np

import tdms_bytes as tb
from enginetdms.config import Settings, configure_logging, settings
from enginetdms.io.decoder import read_all_segments
from enginetdms.io.tdms_reader import TdmsReader


def test_defaults(monkeypatch):
    for var in ("ENGINETDMS_LOG_LEVEL", "ENGINETDMS_WAVEFORM_TIME_TRACK", "ENGINETDMS_FFT_AVERAGES"):
        monkeypatch.delenv(var, raising=False)
    s = Settings(_env_file=None)
    assert s.log_level == "WARNING"
    assert s.waveform_time_track is True
    assert s.fft_averages == 0


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ENGINETDMS_FFT_AVERAGES", "8")
    monkeypatch.setenv("enginetdms_waveform_time_track", "false")
    s = Settings(_env_file=None)
    assert s.fft_averages == 8
    assert s.waveform_time_track is False


def test_configure_logging_sets_package_level():
    logger = logging.getLogger("enginetdms")
    before = logger.level
    try:
        configure_logging("debug")
        assert logger.level == logging.DEBUG
        configure_logging(logging.ERROR)
        assert logger.level == logging.ERROR
    finally:
        logger.setLevel(before)


def test_time_track_can_be_disabled(write_tdms, monkeypatch):
    data = tb.segment(
        tb.TOC_META_DATA | tb.TOC_RAW_DATA | tb.TOC_NEW_OBJ_LIST,
        tb.metadata(
            tb.obj("/'G'", tb.NO_DATA),
            tb.obj("/'G'/'x'", tb.raw_index(tb.T_DBL, 3), [tb.prop_dbl("wf_increment", 0.5)]),
        ),
        tb.dbl(1, 2, 3),
    )
    reader = TdmsReader(write_tdms(data))

    t, _ = reader.load("/'G'/'x'")
    assert np.allclose(t, [0.0, 0.5, 1.0])

    monkeypatch.setattr(settings, "waveform_time_track", False)
    t, _ = reader.load("/'G'/'x'")
    assert np.allclose(t, [0.0, 1.0, 2.0])


def test_incomplete_segment_is_logged(stream, caplog):
    data = tb.segment(
        tb.TOC_META_DATA | tb.TOC_RAW_DATA | tb.TOC_NEW_OBJ_LIST,
        tb.metadata(tb.obj("/'G'/'x'", tb.raw_index(tb.T_DBL, 1))),
        tb.dbl(1, 2),
        incomplete=True,
    )
    with caplog.at_level(logging.WARNING, logger="enginetdms"):
        segments = read_all_segments(stream(data))

    assert segments[0].num_chunks == 2
    assert any("Incomplete segment" in r.getMessage() for r in caplog.records)


def test_reader_logs_summary(write_tdms, caplog):
    data = tb.segment(tb.TOC_META_DATA | tb.TOC_NEW_OBJ_LIST, tb.metadata(tb.obj("/", tb.NO_DATA)))
    path = write_tdms(data)
    with caplog.at_level(logging.INFO, logger="enginetdms.io.tdms_reader"):
        TdmsReader(path)
    assert any("1 segments, 0 channels" in r.getMessage() for r in caplog.records)
