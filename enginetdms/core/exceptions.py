# enginetdms/core/exceptions.py
from __future__ import annotations


class CoreError(Exception):
    """Base error for all enginetdms exceptions."""


# ---- Validation / construction errors ----
class InvalidTimeSeries(CoreError):
    """Raised when a TimeSeries is constructed with invalid inputs."""


class InvalidChannel(CoreError):
    """Raised when a Channel / ChannelMeta is constructed with invalid inputs."""


class InvalidGroup(CoreError):
    """Raised when a Group / GroupMeta is constructed with invalid inputs."""


class InvalidDataset(CoreError):
    """Raised when a Dataset / DatasetMeta is constructed with invalid inputs."""


# ---- Lookup errors (also behave like KeyError for dict-like APIs) ----
class ChannelNotFound(CoreError, KeyError):
    """Raised when a requested channel name is not present."""


class GroupNotFound(CoreError, KeyError):
    """Raised when a requested group name is not present."""


# ---- TDMS decoding errors ----
class TdmsError(CoreError):
    """Base error for failures while decoding a TDMS file."""


class TdmsFormatError(TdmsError):
    """
    The file violates the TDMS format.

    `offset` is the absolute byte position where the failing decode step
    started (None when the position is not known).
    """

    def __init__(self, message: str, offset: int | None = None) -> None:
        if offset is not None:
            message = f"{message} (at byte offset {offset})"
        super().__init__(message)
        self.offset = offset


class BadTag(TdmsFormatError):
    """Segment does not start with the 'TDSm' tag."""


class Truncated(TdmsFormatError):
    """The file ended in the middle of a field."""


class InvalidDimension(TdmsFormatError):
    """A raw data index declares an array dimension other than 1."""


class UnknownPropertyType(TdmsFormatError):
    """A property declares a data type the property decoder does not handle."""


class UnknownObjectReference(TdmsFormatError):
    """An object never seen before claims to match the previous segment."""


class ChunkSizeMismatch(TdmsFormatError):
    """Raw data span is not a whole multiple of the per-chunk size."""


class InvalidTimestamp(TdmsFormatError):
    """A LabVIEW timestamp lies outside the representable date range."""


class UnsupportedTdmsFeature(TdmsError):
    """Valid TDMS content this reader deliberately does not handle."""
