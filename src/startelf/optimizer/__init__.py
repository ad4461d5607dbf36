"""Budget-constrained lineup optimizer built on exact-count knapsack curves."""

from .knapsack import CurvePoint, GroupCurve, merge_curves, select_position_group
from .service import (
    DEFAULT_BUDGET_RESOLUTION,
    LineupPick,
    OptimizationResult,
    optimize_auto,
    optimize_for_formation,
)

__all__ = [
    "CurvePoint",
    "DEFAULT_BUDGET_RESOLUTION",
    "GroupCurve",
    "LineupPick",
    "OptimizationResult",
    "merge_curves",
    "optimize_auto",
    "optimize_for_formation",
    "select_position_group",
]
