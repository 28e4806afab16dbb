# enginetdms/core/group.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Mapping

from .channel import Channel
from .collection import NamedCollection, check_members, pick
from .exceptions import ChannelNotFound, InvalidGroup
from .metadata import GroupMeta


@dataclass(frozen=True, slots=True)
class Group(NamedCollection):
    """
    A TDMS group (/'name'): its channels by name, in file order.

    group["Voltage"] looks a channel up; an unknown name raises
    ChannelNotFound.
    """

    name: str
    channels: Mapping[str, Channel] = field(default_factory=dict, repr=False)
    meta: GroupMeta = field(default_factory=GroupMeta, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidGroup("Group.name must be a non-empty string.")
        if not isinstance(self.meta, GroupMeta):
            raise InvalidGroup(f"Group {self.name!r}: meta must be a GroupMeta instance.")
        object.__setattr__(self, "channels", check_members(self.channels, Channel, InvalidGroup))

    def _members(self) -> Mapping[str, Channel]:
        return self.channels

    def _missing(self, name: str) -> KeyError:
        return ChannelNotFound(f"{name!r} in group {self.name!r}")

    @property
    def path(self) -> str | None:
        return self.meta.path

    @property
    def properties(self) -> dict[str, str]:
        return self.meta.properties

    def select(self, names: Iterable[str], *, missing: str = "raise") -> "Group":
        """Keep only the named channels, in the order given."""
        return replace(self, channels=pick(self.channels, names, missing, ChannelNotFound))

    def slice_time(
        self,
        t_min: float | None = None,
        t_max: float | None = None,
        *,
        closed: str = "both",
        drop_empty: bool = False,
    ) -> "Group":
        """Slice every channel; `drop_empty` removes channels left with no samples."""
        sliced = {name: ch.slice_time(t_min, t_max, closed=closed) for name, ch in self.channels.items()}
        if drop_empty:
            sliced = {name: ch for name, ch in sliced.items() if ch.n}
        return replace(self, channels=sliced)
