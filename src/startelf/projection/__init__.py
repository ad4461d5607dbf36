"""Projection scoring model."""

from .scoring import (
    compute_player_projection,
    compute_projections,
    find_upcoming_match,
    implied_probabilities,
)

__all__ = [
    "compute_player_projection",
    "compute_projections",
    "find_upcoming_match",
    "implied_probabilities",
]
