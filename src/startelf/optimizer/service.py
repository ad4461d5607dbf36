"""Lineup optimization: per-formation knapsack combination and auto formation search."""

from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
import logging
import multiprocessing as mp
import os
import time
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from startelf.config import POSITIONS, Formation, get_formation, iter_formations
from startelf.models import Player, Projection

from .knapsack import GroupCurve, combine_curves, select_position_group


logger = logging.getLogger(__name__)

_RESOLUTION_ENV = "STARTELF_BUDGET_RESOLUTION"
_WORKERS_ENV = "STARTELF_WORKERS"

DEFAULT_BUDGET_RESOLUTION = 100_000
_WORKERS_DEFAULT = 1


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


def budget_resolution() -> int:
    return _env_int(_RESOLUTION_ENV, DEFAULT_BUDGET_RESOLUTION, min_value=1)


def default_workers() -> int:
    return _env_int(_WORKERS_ENV, _WORKERS_DEFAULT, min_value=1)


@dataclass(frozen=True)
class LineupPick:
    player_id: str
    name: str
    position: str
    team: str
    cost: int
    p_pred: float
    value: float


@dataclass(frozen=True)
class OptimizationResult:
    formation: str
    lineup: Tuple[LineupPick, ...]
    objective: float
    restbudget: float

    @property
    def total_cost(self) -> int:
        return sum(pick.cost for pick in self.lineup)


CurveCache = Dict[Tuple[str, int], GroupCurve]


def _group_by_position(
    projections: Iterable[Projection],
    blacklist: Iterable[str],
) -> Dict[str, List[Projection]]:
    excluded = set(blacklist or ())
    seen: set[str] = set()
    pool: Dict[str, List[Projection]] = defaultdict(list)
    for projection in projections:
        if projection.player_id in excluded:
            continue
        if projection.player_id in seen:
            logger.warning("Duplicate projection for player %s ignored", projection.player_id)
            continue
        seen.add(projection.player_id)
        pool[projection.position].append(projection)
    return pool


def _to_pick(projection: Projection) -> LineupPick:
    return LineupPick(
        player_id=projection.player_id,
        name=projection.name,
        position=projection.position,
        team=projection.team,
        cost=projection.cost,
        p_pred=projection.p_pred,
        value=projection.value,
    )


def _optimize_pool(
    pool: Dict[str, List[Projection]],
    formation: Formation,
    *,
    budget: float,
    resolution: int,
    cache: Optional[CurveCache] = None,
) -> Optional[OptimizationResult]:
    curves: List[GroupCurve] = []
    for position in POSITIONS:
        count = formation.counts[position]
        key = (position, count)
        curve = cache.get(key) if cache is not None else None
        if curve is None:
            curve = select_position_group(pool.get(position, []), count, budget, resolution=resolution)
            if cache is not None:
                cache[key] = curve
        if not curve.feasible:
            logger.info(
                "Formation %s infeasible: no %s selection of %s players within budget (%s candidates)",
                formation.label,
                position,
                count,
                len(pool.get(position, [])),
            )
            return None
        curves.append(curve)

    best = combine_curves(curves, budget).best(budget)
    if best is None:
        logger.info("Formation %s infeasible: cheapest lineup exceeds budget %s", formation.label, budget)
        return None

    lineup = tuple(_to_pick(projection) for projection in best.iter_picks())
    total_cost = sum(pick.cost for pick in lineup)
    return OptimizationResult(
        formation=formation.label,
        lineup=lineup,
        objective=sum(pick.p_pred for pick in lineup),
        restbudget=budget - total_cost,
    )


def optimize_for_formation(
    projections: Sequence[Projection],
    formation: str | Formation,
    *,
    budget: float,
    blacklist: Iterable[str] = (),
    resolution: Optional[int] = None,
) -> Optional[OptimizationResult]:
    """Best lineup for one formation, or None when nothing legal fits the budget."""

    resolved = get_formation(formation)
    step = resolution or budget_resolution()
    start = time.perf_counter()
    result = _optimize_pool(
        _group_by_position(projections, blacklist),
        resolved,
        budget=budget,
        resolution=step,
    )
    _log_outcome(resolved.label, result, time.perf_counter() - start)
    return result


def _log_outcome(label: str, result: Optional[OptimizationResult], elapsed: float) -> None:
    if result is None:
        logger.info("Formation %s produced no lineup (%.3fs)", label, elapsed)
        return
    logger.info(
        "Formation %s – objective %.2f, cost %s, rest %s (%.3fs)",
        label,
        result.objective,
        result.total_cost,
        result.restbudget,
        elapsed,
    )


@dataclass(frozen=True)
class _FormationJob:
    projections: Tuple[Projection, ...]
    formation: Formation
    budget: float
    blacklist: Tuple[str, ...]
    resolution: int


def _run_formation_job(job: _FormationJob) -> Optional[OptimizationResult]:
    return optimize_for_formation(
        job.projections,
        job.formation,
        budget=job.budget,
        blacklist=job.blacklist,
        resolution=job.resolution,
    )


def _pick_best(results: Iterable[Optional[OptimizationResult]]) -> Optional[OptimizationResult]:
    best: Optional[OptimizationResult] = None
    for result in results:
        if result is not None and (best is None or result.objective > best.objective):
            best = result
    return best


def optimize_auto(
    players: Sequence[Player],
    projections: Sequence[Projection],
    budget: float,
    blacklist: Iterable[str] = (),
    forced_formation: str | Formation | None = None,
    *,
    resolution: Optional[int] = None,
    workers: Optional[int] = None,
) -> Optional[OptimizationResult]:
    """Best lineup across the formation catalog, or for ``forced_formation`` when given.

    Ties on objective keep the earlier catalog formation. Parallel runs reduce
    in catalog order, so they return exactly what the sequential path returns.
    """

    player_ids = {player.player_id for player in players}
    relevant = tuple(p for p in projections if p.player_id in player_ids)
    excluded = tuple(sorted(set(blacklist or ())))
    step = resolution or budget_resolution()

    if forced_formation is not None:
        return optimize_for_formation(relevant, forced_formation, budget=budget, blacklist=excluded, resolution=step)

    formations = list(iter_formations())
    worker_count = max(1, workers if workers is not None else default_workers())
    run_start = time.perf_counter()

    logger.info(
        "Starting auto formation search – formations=%s, pool=%s, budget=%s, excluded=%s, resolution=%s, workers=%s",
        len(formations),
        len(relevant),
        budget,
        len(excluded),
        step,
        worker_count,
    )

    if worker_count == 1:
        pool = _group_by_position(relevant, excluded)
        cache: CurveCache = {}
        results: List[Optional[OptimizationResult]] = []
        for formation in formations:
            start = time.perf_counter()
            result = _optimize_pool(pool, formation, budget=budget, resolution=step, cache=cache)
            _log_outcome(formation.label, result, time.perf_counter() - start)
            results.append(result)
    else:
        jobs = [
            _FormationJob(
                projections=relevant,
                formation=formation,
                budget=budget,
                blacklist=excluded,
                resolution=step,
            )
            for formation in formations
        ]
        ctx = mp.get_context("spawn")
        with ProcessPoolExecutor(max_workers=min(worker_count, len(jobs)), mp_context=ctx) as executor:
            results = list(executor.map(_run_formation_job, jobs))

    best = _pick_best(results)
    feasible = sum(1 for result in results if result is not None)
    if best is None:
        logger.info(
            "Auto formation search found no feasible lineup (%.2fs)",
            time.perf_counter() - run_start,
        )
    else:
        logger.info(
            "Auto formation search chose %s – objective %.2f (%s/%s feasible, %.2fs)",
            best.formation,
            best.objective,
            feasible,
            len(formations),
            time.perf_counter() - run_start,
        )
    return best
