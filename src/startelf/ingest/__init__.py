"""Input adapters that normalize raw matchday data."""

from .dataset import (
    Dataset,
    LoadReport,
    load_dataset,
    missing_positions,
    parse_dataset,
    parse_players,
)

__all__ = [
    "Dataset",
    "LoadReport",
    "load_dataset",
    "missing_positions",
    "parse_dataset",
    "parse_players",
]
