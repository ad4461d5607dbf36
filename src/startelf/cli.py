"""Command-line interface for picking a starting eleven from a matchday dataset."""

from __future__ import annotations

import argparse
import csv
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from startelf.api import run_optimization
from startelf.api.schemas import NoSolutionResponse, OptimizeRequest, OptimizeResponse
from startelf.config import FORMATION_LABELS
from startelf.ingest import load_dataset
from startelf.models import DEFAULT_PARAMS

_WEIGHT_FIELDS = ("w_base", "w_form", "w_odds", "w_home", "w_minutes", "w_risk", "alpha", "beta", "gamma")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pick the best starting eleven from a matchday dataset")
    parser.add_argument("dataset", type=Path, help="Path to the matchday JSON (players, matches, odds)")
    parser.add_argument("--budget", type=int, required=True, help="Total budget for the eleven")
    parser.add_argument(
        "--formation",
        default="auto",
        help=f"Formation label or 'auto' ({', '.join(FORMATION_LABELS)})",
    )
    parser.add_argument(
        "--base-mode",
        choices=("avg", "sum", "last3"),
        default=DEFAULT_PARAMS.base_mode,
        help="How the scoring history collapses into a base score",
    )
    for name in _WEIGHT_FIELDS:
        parser.add_argument(
            f"--{name.replace('_', '-')}",
            dest=name,
            type=float,
            default=getattr(DEFAULT_PARAMS, name),
            help=f"Projection weight {name} (default {getattr(DEFAULT_PARAMS, name)})",
        )
    parser.add_argument(
        "--exclude",
        nargs="*",
        default=[],
        help="Player IDs to remove from consideration",
    )
    parser.add_argument("--round", type=int, default=None, help="Only use fixtures of this round")
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Processes used for auto formation search (default from STARTELF_WORKERS)",
    )
    parser.add_argument(
        "--resolution",
        type=int,
        default=None,
        help="Budget discretization step (default from STARTELF_BUDGET_RESOLUTION)",
    )
    parser.add_argument("--output", type=Path, default=None, help="Optional lineup CSV path")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (e.g. INFO, DEBUG)")
    return parser


def _write_lineup_csv(path: Path, response: OptimizeResponse) -> None:
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["player_id", "name", "position", "team", "cost", "p_pred", "value"])
        for pick in response.lineup:
            writer.writerow([
                pick.player_id,
                pick.name,
                pick.position,
                pick.team,
                pick.cost,
                f"{pick.p_pred:.4f}",
                f"{pick.value:.8f}",
            ])


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    if args.resolution is not None and args.resolution < 1:
        parser.error("--resolution must be a positive integer")

    try:
        request = OptimizeRequest.model_validate(
            {
                "budget": args.budget,
                "formation": args.formation,
                "base_mode": args.base_mode,
                "weights": {name: getattr(args, name) for name in _WEIGHT_FIELDS},
                "blacklist": args.exclude or [],
                "round": args.round,
            }
        )
    except ValidationError as exc:
        parser.error(f"invalid request: {exc}")

    try:
        dataset, report = load_dataset(args.dataset)
    except (OSError, ValueError) as exc:
        parser.error(f"could not load dataset {args.dataset}: {exc}")

    if report.skipped_players:
        preview = ", ".join(report.skipped_players[:5])
        more = len(report.skipped_players) - 5
        suffix = f", +{more} more" if more > 0 else ""
        print(f"Skipped invalid players: {preview}{suffix}", file=sys.stderr)

    response = run_optimization(request, dataset, resolution=args.resolution, workers=args.workers)
    if response is None:
        print(NoSolutionResponse().model_dump_json(indent=2))
        sys.exit(1)

    print(response.model_dump_json(indent=2))
    if args.output:
        _write_lineup_csv(args.output, response)
        print(f"Wrote lineup to {args.output}", file=sys.stderr)


if __name__ == "__main__":
    main()
