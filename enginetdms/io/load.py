# enginetdms/io/load.py
from __future__ import annotations

import os
from pathlib import Path

from enginetdms.io.tdms_reader import RawChannelInfo, TdmsReader, build_path
from enginetdms.core import (
    Dataset,
    Group,
    Channel,
    TimeSeries,
    LazyTimeSeries,
    ChannelMeta,
    GroupMeta,
    DatasetMeta,
)


def _as_strings(props) -> dict[str, str]:
    return {name: prop.value for name, prop in props.items()}


def _make_loader(reader: TdmsReader, path: str):
    def _loader():
        return reader.load(path)

    return _loader


def _channel(reader: TdmsReader, raw_ch: RawChannelInfo, lazy: bool) -> Channel:
    props = _as_strings(raw_ch.properties)
    unit = props.get("unit_string")
    waveform = reader.waveform(raw_ch.path)
    if lazy:
        series = LazyTimeSeries(
            loader=_make_loader(reader, raw_ch.path), unit=unit, name=raw_ch.name, waveform=waveform
        )
    else:
        t, v = reader.load(raw_ch.path)
        series = TimeSeries(time=t, values=v, unit=unit, name=raw_ch.name, waveform=waveform)
    return Channel(
        name=raw_ch.name,
        series=series,
        meta=ChannelMeta(
            unit=unit,
            description=props.get("description"),
            path=raw_ch.path,
            data_type=raw_ch.data_type_name,
            properties=props,
        ),
    )


def load_tdms(path: str | os.PathLike, *, lazy: bool = False) -> Dataset:
    """
    Decode a TDMS file into a Dataset of Groups of Channels.

    lazy:
        False: read every channel's data now
        True : read each channel on first access
    """
    reader = TdmsReader(path)

    groups = {}
    for name in reader.list_groups():
        channels = {}
        for raw_ch in reader.list_channels(name):
            ch = _channel(reader, raw_ch, lazy)
            channels[ch.name] = ch

        group_path = build_path(name)
        group_props = _as_strings(reader.object_properties(group_path))
        groups[name] = Group(
            name=name,
            channels=channels,
            meta=GroupMeta(
                description=group_props.get("description"),
                path=group_path,
                properties=group_props,
            ),
        )

    file_props = _as_strings(reader.object_properties("/"))
    return Dataset(
        groups=groups,
        meta=DatasetMeta(
            description=file_props.get("description"),
            source=str(Path(reader.path)),
            properties=file_props,
        ),
    )
