"""
Core domain objects for enginetdms.

This module defines the loaded view of a TDMS file:
- TimeSeries: validated 1D channel data over time, with waveform timing
- Channel: named signal (TimeSeries + properties)
- Group: TDMS group containing multiple channels
- Dataset: one file, as a collection of groups

It also holds the exception hierarchy shared with the io layer. The core
layer is independent from the binary decoder.
"""

from .timeseries import TimeSeries, LazyTimeSeries, Waveform, window_mask
from .channel import Channel
from .group import Group
from .dataset import Dataset
from .metadata import ChannelMeta, GroupMeta, DatasetMeta
from .exceptions import (
    CoreError,
    InvalidTimeSeries,
    InvalidChannel,
    InvalidGroup,
    InvalidDataset,
    ChannelNotFound,
    GroupNotFound,
    TdmsError,
    TdmsFormatError,
    BadTag,
    Truncated,
    InvalidDimension,
    UnknownPropertyType,
    UnknownObjectReference,
    ChunkSizeMismatch,
    InvalidTimestamp,
    UnsupportedTdmsFeature,
)


__all__ = [
    # time series
    "TimeSeries",
    "LazyTimeSeries",
    "Waveform",
    "window_mask",

    # domain objects
    "Channel",
    "Group",
    "Dataset",

    # metadata
    "ChannelMeta",
    "GroupMeta",
    "DatasetMeta",

    # exceptions
    "CoreError",
    "InvalidTimeSeries",
    "InvalidChannel",
    "InvalidGroup",
    "InvalidDataset",
    "ChannelNotFound",
    "GroupNotFound",
    "TdmsError",
    "TdmsFormatError",
    "BadTag",
    "Truncated",
    "InvalidDimension",
    "UnknownPropertyType",
    "UnknownObjectReference",
    "ChunkSizeMismatch",
    "InvalidTimestamp",
    "UnsupportedTdmsFeature",
]
