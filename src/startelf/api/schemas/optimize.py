from __future__ import annotations

from typing import List, Literal

from pydantic import AliasChoices, BaseModel, Field, field_validator

from startelf.config import FORMATION_LABELS, is_formation_label
from startelf.models import DEFAULT_PARAMS, ProjectionParams


class WeightsPayload(BaseModel):
    w_base: float = Field(default=DEFAULT_PARAMS.w_base, ge=0.0)
    w_form: float = Field(default=DEFAULT_PARAMS.w_form, ge=0.0)
    w_odds: float = Field(default=DEFAULT_PARAMS.w_odds, ge=0.0)
    w_home: float = Field(default=DEFAULT_PARAMS.w_home, ge=0.0)
    w_minutes: float = Field(default=DEFAULT_PARAMS.w_minutes, ge=0.0)
    w_risk: float = Field(default=DEFAULT_PARAMS.w_risk, ge=0.0)
    alpha: float = DEFAULT_PARAMS.alpha
    beta: float = DEFAULT_PARAMS.beta
    gamma: float = DEFAULT_PARAMS.gamma


class OptimizeRequest(BaseModel):
    budget: int = Field(..., gt=0)
    formation: str = Field(default="auto")
    base_mode: Literal["avg", "sum", "last3"] = Field(
        default="avg",
        validation_alias=AliasChoices("base_mode", "baseMode"),
    )
    weights: WeightsPayload = Field(default_factory=WeightsPayload)
    blacklist: List[str] = Field(default_factory=list)
    round: int | None = Field(default=None, ge=1, validation_alias=AliasChoices("round", "spieltag"))

    @field_validator("formation")
    @classmethod
    def _known_formation(cls, value: str) -> str:
        value = value.strip()
        if value == "auto" or is_formation_label(value):
            return value
        raise ValueError(f"formation must be 'auto' or one of {', '.join(FORMATION_LABELS)}")

    @property
    def forced_formation(self) -> str | None:
        return None if self.formation == "auto" else self.formation

    def to_params(self) -> ProjectionParams:
        return ProjectionParams(base_mode=self.base_mode, **self.weights.model_dump())


class LineupPickResponse(BaseModel):
    player_id: str
    name: str
    position: str
    team: str
    cost: int
    p_pred: float
    value: float


class OptimizeResponse(BaseModel):
    formation: str
    lineup: List[LineupPickResponse]
    objective: float
    restbudget: float


class NoSolutionResponse(BaseModel):
    error: str = "No feasible lineup found"
