# test/conftest.py
import io

import pytest


@pytest.fixture
def write_tdms(tmp_path):
    """Write raw bytes to a .tdms file under tmp_path and return its path."""
    counter = {"n": 0}

    def _write(data: bytes, name: str | None = None):
        counter["n"] += 1
        path = tmp_path / (name or f"file_{counter['n']}.tdms")
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def stream():
    """Wrap bytes in a seekable in-memory binary handle."""
    def _stream(data: bytes) -> io.BytesIO:
        return io.BytesIO(data)

    return _stream
