"""Canonical models shared by the scoring model and the optimizer."""

from .player import Match, Odds, Player, Position, normalize_position, team_key
from .projection import DEFAULT_PARAMS, BaseMode, Projection, ProjectionParams

__all__ = [
    "BaseMode",
    "DEFAULT_PARAMS",
    "Match",
    "Odds",
    "Player",
    "Position",
    "Projection",
    "ProjectionParams",
    "normalize_position",
    "team_key",
]
