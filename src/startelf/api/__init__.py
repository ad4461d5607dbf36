"""Request boundary: validated request + dataset in, lineup response out."""

from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from startelf.api.schemas import LineupPickResponse, OptimizeRequest, OptimizeResponse
from startelf.ingest import Dataset
from startelf.optimizer import OptimizationResult, optimize_auto
from startelf.projection import compute_projections


def result_to_response(result: OptimizationResult) -> OptimizeResponse:
    return OptimizeResponse(
        formation=result.formation,
        lineup=[LineupPickResponse(**asdict(pick)) for pick in result.lineup],
        objective=result.objective,
        restbudget=result.restbudget,
    )


def run_optimization(
    request: OptimizeRequest,
    dataset: Dataset,
    *,
    resolution: Optional[int] = None,
    workers: Optional[int] = None,
) -> Optional[OptimizeResponse]:
    """Project the dataset and pick the best lineup; None when no lineup is feasible."""

    projections = compute_projections(
        dataset.players,
        dataset.matches,
        dataset.odds,
        request.to_params(),
        round=request.round,
    )
    result = optimize_auto(
        dataset.players,
        projections,
        request.budget,
        request.blacklist,
        request.forced_formation,
        resolution=resolution,
        workers=workers,
    )
    if result is None:
        return None
    return result_to_response(result)


__all__ = ["result_to_response", "run_optimization"]
