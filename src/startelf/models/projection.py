"""Scoring parameters and the per-player projection record."""

from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, BaseModel, Field
from pydantic.config import ConfigDict

from .player import Position


BaseMode = Literal["avg", "sum", "last3"]


class ProjectionParams(BaseModel):
    """Weights for the projection model; supplied per request and never mutated."""

    base_mode: BaseMode = Field(default="avg", validation_alias=AliasChoices("base_mode", "baseMode"))
    w_base: float = Field(default=1.0, ge=0.0)
    w_form: float = Field(default=0.35, ge=0.0)
    w_odds: float = Field(default=0.35, ge=0.0)
    w_home: float = Field(default=0.1, ge=0.0)
    w_minutes: float = Field(default=0.2, ge=0.0)
    w_risk: float = Field(default=0.15, ge=0.0)
    alpha: float = 1.0
    beta: float = 0.2
    gamma: float = 0.7

    model_config = ConfigDict(frozen=True)


DEFAULT_PARAMS = ProjectionParams()


class Projection(BaseModel):
    """Predicted points for one player plus the terms that produced them."""

    player_id: str
    name: str = ""
    position: Position
    team: str = ""
    cost: int = Field(default=0, ge=0)
    p_pred: float = Field(..., ge=0.0)
    value: float = Field(..., ge=0.0)
    base: float = 0.0
    form_boost: float = 0.0
    odds_modifier: float = 0.0
    home_bonus: float = 0.0
    minutes_weight: float = 0.0
    risk_penalty: float = 0.0

    model_config = ConfigDict(frozen=True)
