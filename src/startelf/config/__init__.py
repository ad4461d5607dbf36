"""Configuration helpers for formations and positions."""

from .formations import (
    FORMATION_LABELS,
    POSITIONS,
    Formation,
    get_formation,
    is_formation_label,
    iter_formations,
)

__all__ = [
    "FORMATION_LABELS",
    "POSITIONS",
    "Formation",
    "get_formation",
    "is_formation_label",
    "iter_formations",
]
