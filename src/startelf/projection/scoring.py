"""Weighted projection model turning player history and match context into predicted points."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from statistics import fmean, pstdev
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from startelf.models import Match, Odds, Player, Projection, ProjectionParams


logger = logging.getLogger(__name__)

FULL_MATCH_MINUTES = 90.0
FORM_WINDOW = 3
RECENT_MINUTES_WINDOW = 5


@dataclass(frozen=True)
class OutcomeProbabilities:
    win: float
    draw: float
    loss: float


def _clean(values: Optional[Iterable[float]]) -> List[float]:
    if not values:
        return []
    return [float(value) for value in values if value is not None and math.isfinite(value)]


def rolling_average(values: Sequence[float], window: int) -> float:
    if not values:
        return 0.0
    return fmean(values[-window:])


def base_score(points: Sequence[float], mode: str) -> float:
    """Collapse a scoring history into the base score selected by ``mode``."""

    if not points:
        return 0.0
    if mode == "sum":
        return math.fsum(points)
    if mode == "last3":
        return rolling_average(points, FORM_WINDOW)
    return fmean(points)


def form_boost(points: Sequence[float]) -> float:
    """Z-score of the recent mean against the season mean."""

    if not points:
        return 0.0
    mean = fmean(points)
    std = pstdev(points) if len(points) > 1 else 0.0
    return (rolling_average(points, FORM_WINDOW) - mean) / (std or 1.0)


def risk_penalty(points: Sequence[float]) -> float:
    if len(points) < 2:
        return 0.0
    return pstdev(points)


def minutes_weight(minutes: Sequence[float]) -> float:
    if not minutes:
        return 0.0
    share = rolling_average(minutes, RECENT_MINUTES_WINDOW) / FULL_MATCH_MINUTES
    return min(1.0, max(0.0, share))


def implied_probabilities(odds: Odds) -> Optional[Tuple[float, float, float]]:
    """Return normalized (home, draw, away) probabilities, or None when the odds carry no signal."""

    raw = (odds.home, odds.draw, odds.away)
    if odds.format == "prob":
        weights = raw
    else:
        weights = tuple(1.0 / price if price > 0 else 0.0 for price in raw)
    total = math.fsum(weights)
    if total <= 0:
        return None
    return weights[0] / total, weights[1] / total, weights[2] / total


def outcome_probabilities(odds: Optional[Odds], *, is_home: bool) -> Optional[OutcomeProbabilities]:
    if odds is None:
        return None
    probabilities = implied_probabilities(odds)
    if probabilities is None:
        return None
    home, draw, away = probabilities
    if is_home:
        return OutcomeProbabilities(win=home, draw=draw, loss=away)
    return OutcomeProbabilities(win=away, draw=draw, loss=home)


def odds_modifier(probabilities: Optional[OutcomeProbabilities], params: ProjectionParams) -> float:
    if probabilities is None or params.w_odds == 0:
        return 0.0
    return (
        params.alpha * probabilities.win
        + params.beta * probabilities.draw
        - params.gamma * probabilities.loss
    )


def _match_sort_key(item: Tuple[int, Match]) -> Tuple[int, int, float, int]:
    index, match = item
    if match.kickoff is None:
        return match.round, 1, 0.0, index
    return match.round, 0, match.kickoff.timestamp(), index


def find_upcoming_match(team: str, matches: Sequence[Match]) -> Optional[Match]:
    """Earliest fixture (round, kickoff, input order) that involves ``team``."""

    candidates = [(idx, match) for idx, match in enumerate(matches) if match.involves(team)]
    if not candidates:
        return None
    return min(candidates, key=_match_sort_key)[1]


def build_odds_lookup(matches: Sequence[Match], odds: Sequence[Odds]) -> Dict[str, Odds]:
    lookup: Dict[str, Odds] = {}
    for entry in odds:
        if entry.match_id:
            lookup.setdefault(entry.match_id, entry)
    for match in matches:
        if match.odds is not None and match.match_id not in lookup:
            lookup[match.match_id] = match.odds.model_copy(update={"match_id": match.match_id})
    return lookup


def compute_player_projection(
    player: Player,
    matches: Sequence[Match],
    odds: Sequence[Odds] | Mapping[str, Odds],
    params: ProjectionParams,
) -> Projection:
    """Score a single player; missing history, minutes, match or odds contribute nothing."""

    odds_lookup = odds if isinstance(odds, Mapping) else build_odds_lookup(matches, odds)
    match = find_upcoming_match(player.team, matches) if player.team else None
    return _project(player, match, odds_lookup, params)


def _project(
    player: Player,
    match: Optional[Match],
    odds_lookup: Mapping[str, Odds],
    params: ProjectionParams,
) -> Projection:
    points = _clean(player.points_hist)
    minutes = _clean(player.minutes_hist)

    base = base_score(points, params.base_mode)
    form = form_boost(points)
    risk = risk_penalty(points)
    reliability = minutes_weight(minutes)

    is_home = match is not None and match.is_home(player.team)
    probabilities = None
    if match is not None:
        probabilities = outcome_probabilities(odds_lookup.get(match.match_id), is_home=is_home)
    modifier = odds_modifier(probabilities, params)
    home_bonus = 1.0 if is_home else 0.0

    p_pred = (
        params.w_base * base
        + params.w_form * form
        + params.w_odds * modifier
        + params.w_home * home_bonus
        + params.w_minutes * reliability
        - params.w_risk * risk
    )
    p_pred = max(0.0, p_pred)

    return Projection(
        player_id=player.player_id,
        name=player.name,
        position=player.position,
        team=player.team,
        cost=player.cost,
        p_pred=p_pred,
        value=p_pred / max(player.cost, 1),
        base=base,
        form_boost=form,
        odds_modifier=modifier,
        home_bonus=home_bonus,
        minutes_weight=reliability,
        risk_penalty=risk,
    )


def compute_projections(
    players: Sequence[Player],
    matches: Sequence[Match],
    odds: Sequence[Odds],
    params: ProjectionParams,
    *,
    round: Optional[int] = None,
) -> List[Projection]:
    """Project every player in input order."""

    relevant_matches = [m for m in matches if round is None or m.round == round]
    odds_lookup = build_odds_lookup(relevant_matches, odds)
    projections: List[Projection] = []
    without_match = 0
    for player in players:
        match = find_upcoming_match(player.team, relevant_matches) if player.team else None
        if match is None:
            without_match += 1
        projections.append(_project(player, match, odds_lookup, params))
    logger.info(
        "Projected %s players (base_mode=%s, round=%s, %s without fixture, %s odds entries)",
        len(projections),
        params.base_mode,
        "any" if round is None else round,
        without_match,
        len(odds_lookup),
    )
    return projections
