# enginetdms/core/dataset.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Mapping

from .channel import Channel
from .collection import NamedCollection, check_members, pick
from .exceptions import GroupNotFound, InvalidDataset
from .group import Group
from .metadata import DatasetMeta


@dataclass(frozen=True, slots=True)
class Dataset(NamedCollection):
    """
    One TDMS file: its groups by name, in file order.

    ds["Measurements"]["Voltage"] and ds.channel("Measurements", "Voltage")
    are equivalent. File-level ("/") properties live on `meta`.
    """

    groups: Mapping[str, Group] = field(default_factory=dict, repr=False)
    meta: DatasetMeta = field(default_factory=DatasetMeta, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.meta, DatasetMeta):
            raise InvalidDataset("Dataset.meta must be a DatasetMeta instance.")
        object.__setattr__(self, "groups", check_members(self.groups, Group, InvalidDataset))

    def _members(self) -> Mapping[str, Group]:
        return self.groups

    def _missing(self, name: str) -> KeyError:
        return GroupNotFound(name)

    @property
    def source(self) -> str | None:
        return self.meta.source

    @property
    def properties(self) -> dict[str, str]:
        return self.meta.properties

    def channel(self, group: str, name: str) -> Channel:
        return self[group][name]

    def select(self, names: Iterable[str], *, missing: str = "raise") -> "Dataset":
        """Keep only the named groups, in the order given."""
        return replace(self, groups=pick(self.groups, names, missing, GroupNotFound))

    def slice_time(
        self,
        t_min: float | None = None,
        t_max: float | None = None,
        *,
        closed: str = "both",
        drop_empty_groups: bool = False,
        drop_empty_channels: bool = False,
    ) -> "Dataset":
        """
        Slice every group.

        drop_empty_channels is passed on as Group.slice_time(drop_empty=...);
        drop_empty_groups then removes groups left without channels.
        """
        sliced = {
            name: grp.slice_time(t_min, t_max, closed=closed, drop_empty=drop_empty_channels)
            for name, grp in self.groups.items()
        }
        if drop_empty_groups:
            sliced = {name: grp for name, grp in sliced.items() if len(grp)}
        return replace(self, groups=sliced)
