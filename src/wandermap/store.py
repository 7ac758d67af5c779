"""Visit state and search selection: immutable snapshots owned by the host application.

Every mutation returns a new snapshot, so a renderer holding an older one
never sees a half-applied change.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class VisitState:
    """Visited country id → assigned color.

    Entries are kept as a tuple of ``(id, color)`` pairs sorted by id so that
    equality does not depend on the order countries were toggled in.
    """

    entries: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_mapping(cls, colors: Mapping[str, str]) -> "VisitState":
        return cls(tuple(sorted(colors.items())))

    def toggle(self, country_id: str, color: str) -> "VisitState":
        """Remove ``country_id`` if visited, otherwise add it with ``color``."""
        colors = dict(self.entries)
        if country_id in colors:
            del colors[country_id]
        else:
            colors[country_id] = color
        return VisitState.from_mapping(colors)

    def recolor(self, color: str) -> "VisitState":
        """Assign ``color`` to every visited country. The key set is unchanged."""
        return VisitState(tuple((cid, color) for cid, _ in self.entries))

    def count(self) -> int:
        return len(self.entries)

    def color_of(self, country_id: str) -> str | None:
        for cid, color in self.entries:
            if cid == country_id:
                return color
        return None

    def ids(self) -> tuple[str, ...]:
        return tuple(cid for cid, _ in self.entries)

    def as_dict(self) -> dict[str, str]:
        return dict(self.entries)

    def __contains__(self, country_id: object) -> bool:
        return any(cid == country_id for cid, _ in self.entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids())

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class SearchSelection:
    """Countries flagged from search. Independent of visit status."""

    ids: frozenset[str] = frozenset()

    def toggle(self, country_id: str) -> "SearchSelection":
        if country_id in self.ids:
            return SearchSelection(self.ids - {country_id})
        return SearchSelection(self.ids | {country_id})

    def clear(self) -> "SearchSelection":
        return SearchSelection()

    def __contains__(self, country_id: object) -> bool:
        return country_id in self.ids

    def __len__(self) -> int:
        return len(self.ids)
