"""Load matchday datasets (players, fixtures, odds) from JSON into canonical models."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from pydantic import AliasChoices, BaseModel, Field, ValidationError
from pydantic.config import ConfigDict

from startelf.config import POSITIONS
from startelf.models import Match, Odds, Player


logger = logging.getLogger(__name__)


class Dataset(BaseModel):
    """Everything the projection model needs for one round."""

    players: List[Player] = Field(default_factory=list)
    matches: List[Match] = Field(default_factory=list)
    odds: List[Odds] = Field(default_factory=list)
    updated_at: Optional[datetime] = Field(default=None, validation_alias=AliasChoices("updated_at", "updatedAt"))

    model_config = ConfigDict(frozen=True)


@dataclass
class LoadReport:
    total_players: int
    loaded_players: int
    skipped_players: List[str] = field(default_factory=list)
    duplicate_players: List[str] = field(default_factory=list)
    missing_positions: List[str] = field(default_factory=list)


def missing_positions(players: Sequence[Player]) -> List[str]:
    """Positions with no player at all; every formation is infeasible without them."""

    present = {player.position for player in players}
    return [position for position in POSITIONS if position not in present]


def _row_label(row: Any, index: int) -> str:
    if isinstance(row, Mapping):
        for key in ("player_id", "playerId", "id", "name"):
            if row.get(key) not in (None, ""):
                return str(row[key])
    return f"#{index}"


def parse_players(rows: Sequence[Any]) -> Tuple[List[Player], LoadReport]:
    """Validate player rows one by one, skipping rows that cannot be normalized."""

    players: List[Player] = []
    report = LoadReport(total_players=len(rows), loaded_players=0)
    seen: set[str] = set()
    for index, row in enumerate(rows):
        try:
            player = Player.model_validate(row)
        except ValidationError as exc:
            label = _row_label(row, index)
            logger.warning("Skipping player %s: %s", label, exc.errors()[0].get("msg", "invalid"))
            report.skipped_players.append(label)
            continue
        if player.player_id in seen:
            report.duplicate_players.append(player.player_id)
            continue
        seen.add(player.player_id)
        players.append(player)
    report.loaded_players = len(players)
    report.missing_positions = missing_positions(players)
    return players, report


def parse_dataset(payload: Mapping[str, Any]) -> Tuple[Dataset, LoadReport]:
    players, report = parse_players(list(payload.get("players") or []))
    dataset = Dataset.model_validate(
        {
            "players": players,
            "matches": payload.get("matches") or [],
            "odds": payload.get("odds") or [],
            "updated_at": payload.get("updated_at", payload.get("updatedAt")),
        }
    )
    if report.skipped_players or report.duplicate_players:
        logger.warning(
            "Dataset players loaded %s/%s (skipped %s, duplicates %s)",
            report.loaded_players,
            report.total_players,
            len(report.skipped_players),
            len(report.duplicate_players),
        )
    if report.missing_positions:
        logger.warning("Dataset has no players for positions: %s", ", ".join(report.missing_positions))
    return dataset, report


def load_dataset(path: Path) -> Tuple[Dataset, LoadReport]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, Mapping):
        raise ValueError(f"{path} does not contain a dataset object")
    dataset, report = parse_dataset(data)
    logger.info(
        "Loaded %s: %s players, %s matches, %s odds entries",
        path,
        len(dataset.players),
        len(dataset.matches),
        len(dataset.odds),
    )
    return dataset, report
