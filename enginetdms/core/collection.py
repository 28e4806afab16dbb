# enginetdms/core/collection.py
"""Read-only, name-keyed container behaviour shared by Group and Dataset."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Callable, Iterable, Iterator, TypeVar

M = TypeVar("M")


def check_members(members: object, member_type: type[M], error: type[Exception]) -> dict[str, M]:
    """Copy a name -> member mapping, checking each key is its member's name."""
    kind = member_type.__name__
    if not isinstance(members, Mapping):
        raise error(f"{kind}s must be given as a mapping of name to {kind}.")
    checked: dict[str, M] = {}
    for key, member in members.items():
        if not isinstance(member, member_type):
            raise error(f"{key!r} maps to {type(member).__name__}, expected {kind}.")
        if key != member.name:  # type: ignore[attr-defined]
            raise error(f"{kind} {member.name!r} is stored under the key {key!r}.")  # type: ignore[attr-defined]
        checked[key] = member
    return checked


def pick(
    members: Mapping[str, M],
    names: Iterable[str],
    missing: str,
    not_found: Callable[[str], KeyError],
) -> dict[str, M]:
    """
    Members listed in `names`, in that order.

    missing:
      - "raise": unknown names raise `not_found(name)`
      - "ignore": unknown names are skipped
    """
    if missing not in ("raise", "ignore"):
        raise ValueError(f"missing must be 'raise' or 'ignore', got {missing!r}")
    picked: dict[str, M] = {}
    for name in names:
        if name in members:
            picked[name] = members[name]
        elif missing == "raise":
            raise not_found(name)
    return picked


class NamedCollection(Mapping):
    """
    Mapping over `_members()` whose failed lookups raise `_missing(name)`.

    Members expose `t_start` / `t_end`; the collection spans all of them.
    """

    __slots__ = ()

    def _members(self) -> Mapping[str, object]:
        raise NotImplementedError

    def _missing(self, name: str) -> KeyError:
        raise NotImplementedError

    def __getitem__(self, name: str):
        try:
            return self._members()[name]
        except KeyError:
            raise self._missing(name) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._members())

    def __len__(self) -> int:
        return len(self._members())

    @property
    def t_start(self) -> float | None:
        starts = [m.t_start for m in self._members().values() if m.t_start is not None]  # type: ignore[attr-defined]
        return min(starts) if starts else None

    @property
    def t_end(self) -> float | None:
        ends = [m.t_end for m in self._members().values() if m.t_end is not None]  # type: ignore[attr-defined]
        return max(ends) if ends else None
