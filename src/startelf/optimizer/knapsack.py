"""Exact-count knapsack curves for one position group and their budget-sharing merge.

Costs are bucketed into budget units of ``resolution`` money (rounded up), but
every state carries its real cost and is checked against the real budget. Each
bucket keeps its best-value state and its cheapest state, so the cheapest legal
selection always survives and feasibility is decided exactly. Only the objective
can fall short of the true optimum, and only when distinct prices share a bucket;
with prices that are multiples of the resolution the result is exact.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from startelf.models import Projection


# (candidate index, previous link); a persistent backpointer chain per DP state.
_Chain = Optional[Tuple[int, "_Chain"]]

# (value, real cost, payload)
_Entry = Tuple[float, int, Any]
# (best value, cheapest) states of one unit bucket
_Bucket = Tuple[_Entry, _Entry]


@dataclass(frozen=True)
class CurvePoint:
    """Best selection found at one real spend level."""

    cost: int
    value: float
    units: int = 0
    picks: Tuple[Projection, ...] = ()
    parts: Tuple["CurvePoint", ...] = ()

    def iter_picks(self) -> Iterator[Projection]:
        for part in self.parts:
            yield from part.iter_picks()
        yield from self.picks


@dataclass(frozen=True)
class GroupCurve:
    """Pareto-optimal real cost -> value curve, sorted by ascending cost and value."""

    points: Tuple[CurvePoint, ...]

    @property
    def feasible(self) -> bool:
        return bool(self.points)

    def best(self, budget: Optional[float] = None) -> Optional[CurvePoint]:
        chosen = None
        for point in self.points:
            if budget is not None and point.cost > budget:
                break
            chosen = point
        return chosen

    def __len__(self) -> int:
        return len(self.points)


EMPTY_CURVE = GroupCurve(points=())


def cost_units(cost: int, resolution: int) -> int:
    return -(-max(cost, 0) // resolution)


def _offer(table: Dict[int, _Bucket], units: int, entry: _Entry) -> None:
    current = table.get(units)
    if current is None:
        table[units] = (entry, entry)
        return
    best, cheapest = current
    value, cost, _ = entry
    if value > best[0] or (value == best[0] and cost < best[1]):
        best = entry
    if cost < cheapest[1] or (cost == cheapest[1] and value > cheapest[0]):
        cheapest = entry
    table[units] = (best, cheapest)


def _bucket_entries(bucket: _Bucket) -> Tuple[_Entry, ...]:
    best, cheapest = bucket
    return (best,) if best is cheapest else (best, cheapest)


def _frontier(table: Dict[int, _Bucket]) -> List[Tuple[int, _Entry]]:
    """(units, entry) pairs whose value beats every cheaper entry, by ascending real cost."""

    flat = [(units, entry) for units, bucket in table.items() for entry in _bucket_entries(bucket)]
    flat.sort(key=lambda item: (item[1][1], -item[1][0]))
    keep: List[Tuple[int, _Entry]] = []
    best_value = float("-inf")
    for units, entry in flat:
        if entry[0] > best_value:
            keep.append((units, entry))
            best_value = entry[0]
    return keep


def _unwind(chain: _Chain) -> List[int]:
    indices: List[int] = []
    while chain is not None:
        index, chain = chain
        indices.append(index)
    indices.reverse()
    return indices


def select_position_group(
    candidates: Sequence[Projection],
    count: int,
    budget: float,
    *,
    resolution: int,
) -> GroupCurve:
    """Best total p_pred for picking exactly ``count`` candidates at each spend level.

    Selections whose real cost exceeds ``budget`` are dropped, which also bounds
    the unit table at ``floor(budget / resolution) + count`` units. Returns an
    empty curve when fewer than ``count`` candidates fit, and a single zero
    point for ``count == 0``.
    """

    if count < 0:
        raise ValueError("count must be non-negative")
    if count == 0:
        return GroupCurve(points=(CurvePoint(cost=0, value=0.0),))
    if len(candidates) < count:
        return EMPTY_CURVE

    # layers[j][u] -> best and cheapest states for exactly j picks at u units
    layers: List[Dict[int, _Bucket]] = [{0: ((0.0, 0, None), (0.0, 0, None))}]
    layers.extend({} for _ in range(count))

    for index, candidate in enumerate(candidates):
        if candidate.cost > budget:
            continue
        weight = cost_units(candidate.cost, resolution)
        for picked in range(min(count, index + 1), 0, -1):
            target = layers[picked]
            for spent, bucket in list(layers[picked - 1].items()):
                for value, cost, chain in _bucket_entries(bucket):
                    total = cost + candidate.cost
                    if total > budget:
                        continue
                    _offer(target, spent + weight, (value + candidate.p_pred, total, (index, chain)))

    points = []
    for units, (value, cost, chain) in _frontier(layers[count]):
        picks = tuple(candidates[i] for i in _unwind(chain))
        points.append(CurvePoint(cost=cost, value=value, units=units, picks=picks))
    return GroupCurve(points=tuple(points))


def merge_curves(left: GroupCurve, right: GroupCurve, budget: float) -> GroupCurve:
    """Knapsack convolution of two curves under one shared real budget."""

    table: Dict[int, _Bucket] = {}
    for lhs in left.points:
        if lhs.cost > budget:
            break
        for rhs in right.points:
            total = lhs.cost + rhs.cost
            if total > budget:
                break
            _offer(table, lhs.units + rhs.units, (lhs.value + rhs.value, total, (lhs, rhs)))

    points = []
    for units, (value, cost, parts) in _frontier(table):
        points.append(CurvePoint(cost=cost, value=value, units=units, parts=parts))
    return GroupCurve(points=tuple(points))


def combine_curves(curves: Sequence[GroupCurve], budget: float) -> GroupCurve:
    """Fold curves left to right; infeasible as soon as any curve is empty."""

    if not curves:
        return GroupCurve(points=(CurvePoint(cost=0, value=0.0),))
    combined = curves[0]
    for curve in curves[1:]:
        if not combined.feasible:
            break
        combined = merge_curves(combined, curve, budget)
    return combined
