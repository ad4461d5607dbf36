"""Canonical player, match and odds models shared across scoring and optimizer layers."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic.config import ConfigDict


Position = Literal["GK", "DEF", "MID", "FWD"]

_POSITION_ALIASES: Dict[str, str] = {
    "GK": "GK",
    "G": "GK",
    "GOALKEEPER": "GK",
    "TW": "GK",
    "DEF": "DEF",
    "D": "DEF",
    "DEFENDER": "DEF",
    "ABW": "DEF",
    "MID": "MID",
    "M": "MID",
    "MIDFIELDER": "MID",
    "MF": "MID",
    "FWD": "FWD",
    "F": "FWD",
    "FW": "FWD",
    "OFF": "FWD",
    "ATT": "FWD",
    "FORWARD": "FWD",
    "ANG": "FWD",
    # Kickbase numeric position codes
    "1": "GK",
    "2": "DEF",
    "3": "MID",
    "4": "FWD",
}


def normalize_position(value: Any) -> str:
    """Map the position codes seen in upstream feeds onto GK/DEF/MID/FWD."""

    token = str(value).strip().upper()
    if token not in _POSITION_ALIASES:
        raise ValueError(f"unknown position code {value!r}")
    return _POSITION_ALIASES[token]


def team_key(team: str) -> str:
    return " ".join(team.split()).casefold()


class Player(BaseModel):
    """Normalized player payload used by the scoring model."""

    player_id: str = Field(..., min_length=1, validation_alias=AliasChoices("player_id", "playerId", "id"))
    name: str = ""
    position: Position
    team: str = Field(default="", validation_alias=AliasChoices("team", "verein"))
    cost: int = Field(default=0, ge=0, validation_alias=AliasChoices("cost", "kosten"))
    points_hist: List[float] = Field(
        default_factory=list,
        validation_alias=AliasChoices("points_hist", "punkte_hist"),
    )
    minutes_hist: Optional[List[float]] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("player_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("position", mode="before")
    @classmethod
    def _normalize_position(cls, value: Any) -> str:
        return normalize_position(value)

    @field_validator("cost", mode="before")
    @classmethod
    def _coerce_cost(cls, value: Any) -> Any:
        if value is None:
            return 0
        if isinstance(value, float):
            return int(round(value))
        return value


class Odds(BaseModel):
    """1X2 odds for a single match, either decimal prices or raw probabilities."""

    match_id: str = Field(default="", validation_alias=AliasChoices("match_id", "matchId"))
    home: float = Field(default=0.0, ge=0.0, validation_alias=AliasChoices("home", "heim"))
    draw: float = Field(default=0.0, ge=0.0, validation_alias=AliasChoices("draw", "unentschieden"))
    away: float = Field(default=0.0, ge=0.0, validation_alias=AliasChoices("away", "auswaerts"))
    format: Literal["decimal", "prob"] = "decimal"

    model_config = ConfigDict(frozen=True)


class Match(BaseModel):
    """A fixture of one round; only used to place a player's team home or away."""

    match_id: str = Field(..., validation_alias=AliasChoices("match_id", "matchId", "id"))
    round: int = Field(default=0, ge=0, validation_alias=AliasChoices("round", "spieltag"))
    home: str = Field(..., validation_alias=AliasChoices("home", "heim"))
    away: str = Field(..., validation_alias=AliasChoices("away", "auswaerts"))
    kickoff: Optional[datetime] = None
    odds: Optional[Odds] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("match_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value

    def involves(self, team: str) -> bool:
        key = team_key(team)
        return bool(key) and key in (team_key(self.home), team_key(self.away))

    def is_home(self, team: str) -> bool:
        return bool(team_key(team)) and team_key(team) == team_key(self.home)
