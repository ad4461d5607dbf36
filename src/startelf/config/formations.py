"""Formation catalog for the starting eleven."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Tuple


POSITIONS: Tuple[str, ...] = ("GK", "DEF", "MID", "FWD")


@dataclass(frozen=True)
class Formation:
    label: str
    defenders: int
    midfielders: int
    forwards: int
    goalkeepers: int = 1

    @property
    def counts(self) -> Mapping[str, int]:
        return {
            "GK": self.goalkeepers,
            "DEF": self.defenders,
            "MID": self.midfielders,
            "FWD": self.forwards,
        }

    @property
    def size(self) -> int:
        return sum(self.counts.values())


def _formation(label: str) -> Formation:
    defenders, midfielders, forwards = (int(part) for part in label.split("-"))
    return Formation(label=label, defenders=defenders, midfielders=midfielders, forwards=forwards)


# Catalog order doubles as the tie-break order for auto formation search.
_FORMATIONS: Dict[str, Formation] = {
    label: _formation(label)
    for label in (
        "4-4-2",
        "4-2-4",
        "3-4-3",
        "4-3-3",
        "5-3-2",
        "3-5-2",
        "5-4-1",
        "4-5-1",
        "3-6-1",
        "5-2-3",
    )
}

FORMATION_LABELS: Tuple[str, ...] = tuple(_FORMATIONS)


def iter_formations() -> Iterable[Formation]:
    """Return the configured formations in catalog order."""

    return _FORMATIONS.values()


def get_formation(label: str | Formation) -> Formation:
    """Fetch a formation by label, raising KeyError if missing."""

    if isinstance(label, Formation):
        return label
    key = label.strip()
    if key not in _FORMATIONS:
        raise KeyError(f"No formation configured for label={label!r}")
    return _FORMATIONS[key]


def is_formation_label(label: str) -> bool:
    return label.strip() in _FORMATIONS
