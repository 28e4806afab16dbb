# enginetdms/core/metadata.py
from __future__ import annotations

from dataclasses import dataclass, field

from .exceptions import InvalidChannel, InvalidGroup, InvalidDataset


@dataclass(frozen=True, slots=True)
class ChannelMeta:
    """
    Metadata attached to a Channel.

    - unit: physical unit, from the `unit_string` property when present
    - description: from the `description` property
    - path: TDMS object path, e.g. /'Group'/'Channel'
    - data_type: name of the raw data type (DBL, I32, ...)
    - properties: every merged property, rendered as strings
    """
    unit: str | None = None
    description: str | None = None
    path: str | None = None
    data_type: str | None = None
    properties: dict[str, str] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if self.properties is None:
            object.__setattr__(self, "properties", {})
        elif not isinstance(self.properties, dict):
            raise InvalidChannel("ChannelMeta.properties must be a dict.")


@dataclass(frozen=True, slots=True)
class GroupMeta:
    """Metadata attached to a Group."""
    description: str | None = None
    path: str | None = None
    properties: dict[str, str] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if self.properties is None:
            object.__setattr__(self, "properties", {})
        elif not isinstance(self.properties, dict):
            raise InvalidGroup("GroupMeta.properties must be a dict.")


@dataclass(frozen=True, slots=True)
class DatasetMeta:
    """
    Metadata attached to a Dataset (one TDMS file).

    properties are the file-level ("/") properties.
    """
    description: str | None = None
    source: str | None = None
    properties: dict[str, str] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if self.properties is None:
            object.__setattr__(self, "properties", {})
        elif not isinstance(self.properties, dict):
            raise InvalidDataset("DatasetMeta.properties must be a dict.")
