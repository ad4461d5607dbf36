from datetime import datetime, timezone

import pytest

from startelf.models import DEFAULT_PARAMS, Match, Odds, Player
from startelf.projection import compute_player_projection, compute_projections, find_upcoming_match
from startelf.projection import scoring
from startelf.projection.scoring import implied_probabilities, minutes_weight


def _player(**overrides) -> Player:
    data = {
        "player_id": "p1",
        "name": "Test Spieler",
        "position": "MID",
        "team": "FC Atlas",
        "cost": 10_000_000,
        "points_hist": [80, 85, 120, 110, 115],
        "minutes_hist": [90, 88, 90, 85, 80],
    }
    data.update(overrides)
    return Player(**data)


MATCH = Match(match_id="m1", round=1, home="FC Atlas", away="SV Comet")
ODDS = Odds(match_id="m1", home=2.0, draw=3.4, away=3.6)


def test_last3_boosts_upward_trending_player_over_avg():
    player = _player()
    avg = compute_projections([player], [MATCH], [ODDS], DEFAULT_PARAMS.model_copy(update={"base_mode": "avg"}))[0]
    last3 = compute_projections([player], [MATCH], [ODDS], DEFAULT_PARAMS.model_copy(update={"base_mode": "last3"}))[0]

    assert avg.base == pytest.approx(102.0)
    assert last3.base == pytest.approx(115.0)
    assert last3.p_pred > avg.p_pred


def test_sum_mode_uses_total_points():
    params = DEFAULT_PARAMS.model_copy(update={"base_mode": "sum"})
    projection = compute_projections([_player()], [], [], params)[0]
    assert projection.base == pytest.approx(510.0)


def test_zero_odds_weight_neutralizes_odds():
    params = DEFAULT_PARAMS.model_copy(update={"w_odds": 0.0})
    with_odds = compute_projections([_player()], [MATCH], [ODDS], params)[0]
    without_odds = compute_projections([_player()], [MATCH], [], params)[0]

    assert with_odds.p_pred == pytest.approx(without_odds.p_pred, abs=1e-9)
    assert with_odds.odds_modifier == 0.0


def test_odds_favor_the_home_favourite():
    home = _player(player_id="h", team="FC Atlas")
    away = _player(player_id="a", team="SV Comet")
    projections = compute_projections([home, away], [MATCH], [ODDS], DEFAULT_PARAMS)

    assert projections[0].home_bonus == 1.0
    assert projections[1].home_bonus == 0.0
    assert projections[0].odds_modifier > projections[1].odds_modifier
    assert projections[0].p_pred > projections[1].p_pred


def test_implied_probabilities_normalize_decimal_and_prob_formats():
    home, draw, away = implied_probabilities(Odds(match_id="m", home=2.0, draw=4.0, away=4.0))
    assert (home, draw, away) == pytest.approx((0.5, 0.25, 0.25))

    home, draw, away = implied_probabilities(Odds(match_id="m", home=50, draw=30, away=20, format="prob"))
    assert (home, draw, away) == pytest.approx((0.5, 0.3, 0.2))

    assert implied_probabilities(Odds(match_id="m")) is None


def test_all_zero_odds_contribute_nothing():
    zero = Odds(match_id="m1", home=0, draw=0, away=0)
    with_zero = compute_projections([_player()], [MATCH], [zero], DEFAULT_PARAMS)[0]
    without = compute_projections([_player()], [MATCH], [], DEFAULT_PARAMS)[0]
    assert with_zero.odds_modifier == 0.0
    assert with_zero.p_pred == pytest.approx(without.p_pred)


def test_missing_fields_degrade_to_zero():
    player = Player(player_id="empty", position="DEF")
    projection = compute_projections([player], [MATCH], [ODDS], DEFAULT_PARAMS)[0]

    assert projection.base == 0.0
    assert projection.form_boost == 0.0
    assert projection.minutes_weight == 0.0
    assert projection.home_bonus == 0.0
    assert projection.p_pred == 0.0
    assert projection.value == 0.0


def test_risk_penalty_lowers_volatile_player():
    steady = _player(player_id="steady", points_hist=[10, 10, 10, 10], minutes_hist=None)
    volatile = _player(player_id="volatile", points_hist=[0, 20, 0, 20], minutes_hist=None)
    projections = compute_projections([steady, volatile], [], [], DEFAULT_PARAMS)

    assert projections[0].risk_penalty == 0.0
    assert projections[1].risk_penalty == pytest.approx(10.0)
    assert projections[0].p_pred > projections[1].p_pred


def test_minutes_weight_uses_recent_window_and_clamps():
    assert minutes_weight([0, 90, 90, 90, 90, 45]) == pytest.approx(0.9)
    assert minutes_weight([120, 120]) == 1.0
    assert minutes_weight([]) == 0.0


def test_prediction_is_floored_at_zero():
    player = _player(points_hist=[0, 0, 0, 30], minutes_hist=[])
    params = DEFAULT_PARAMS.model_copy(update={"w_base": 0.0, "w_form": 0.0, "w_risk": 5.0})
    projection = compute_player_projection(player, [], [], params)
    assert projection.p_pred == 0.0


def test_value_is_points_per_cost():
    projection = compute_projections([_player()], [MATCH], [ODDS], DEFAULT_PARAMS)[0]
    assert projection.value == pytest.approx(projection.p_pred / 10_000_000)

    free = compute_projections([_player(cost=0)], [MATCH], [ODDS], DEFAULT_PARAMS)[0]
    assert free.value == pytest.approx(free.p_pred)


def test_non_finite_history_entries_are_ignored():
    clean = compute_projections([_player(points_hist=[10, 12])], [], [], DEFAULT_PARAMS)[0]
    noisy = compute_projections([_player(points_hist=[10, float("nan"), 12])], [], [], DEFAULT_PARAMS)[0]
    assert noisy.p_pred == pytest.approx(clean.p_pred)


def test_upcoming_match_prefers_earliest_round_and_kickoff():
    later = Match(match_id="r2", round=2, home="SV Comet", away="FC Atlas")
    late_kick = Match(
        match_id="r1b", round=1, home="Bayern Nova", away="FC Atlas",
        kickoff=datetime(2025, 9, 20, 18, 30, tzinfo=timezone.utc),
    )
    early_kick = Match(
        match_id="r1a", round=1, home="FC Atlas", away="Union Helios",
        kickoff=datetime(2025, 9, 20, 15, 30, tzinfo=timezone.utc),
    )
    assert find_upcoming_match("FC Atlas", [later, late_kick, early_kick]).match_id == "r1a"
    assert find_upcoming_match("Nobody FC", [later]) is None


def test_round_filter_selects_that_rounds_fixture():
    round1 = Match(match_id="m1", round=1, home="FC Atlas", away="SV Comet")
    round2 = Match(match_id="m2", round=2, home="SV Comet", away="FC Atlas")
    projection = compute_projections([_player()], [round1, round2], [], DEFAULT_PARAMS, round=2)[0]
    assert projection.home_bonus == 0.0


def test_embedded_match_odds_are_used():
    match = Match(match_id="m1", round=1, home="FC Atlas", away="SV Comet", odds=Odds(home=2.0, draw=3.4, away=3.6))
    embedded = compute_projections([_player()], [match], [], DEFAULT_PARAMS)[0]
    explicit = compute_projections([_player()], [MATCH], [ODDS], DEFAULT_PARAMS)[0]
    assert embedded.odds_modifier == pytest.approx(explicit.odds_modifier)
    assert embedded.odds_modifier != 0.0


def test_projection_is_deterministic():
    players = [_player(player_id=f"p{i}", points_hist=[i, i + 3, i * 2]) for i in range(1, 6)]
    first = compute_projections(players, [MATCH], [ODDS], DEFAULT_PARAMS)
    second = compute_projections(players, [MATCH], [ODDS], DEFAULT_PARAMS)
    assert [p.p_pred for p in first] == [p.p_pred for p in second]
    assert [p.player_id for p in first] == [p.player_id for p in players]


def test_fixture_lookup_runs_once_per_player_and_feeds_the_log(monkeypatch, caplog):
    calls = []
    real_lookup = scoring.find_upcoming_match

    def counting_lookup(team, matches):
        calls.append(team)
        return real_lookup(team, matches)

    monkeypatch.setattr(scoring, "find_upcoming_match", counting_lookup)
    players = [_player(), _player(player_id="p2", team="SV Comet"), _player(player_id="p3", team="Union Helios")]

    with caplog.at_level("INFO", logger="startelf.projection.scoring"):
        projections = compute_projections(players, [MATCH], [ODDS], DEFAULT_PARAMS)

    assert len(projections) == 3
    assert calls == ["FC Atlas", "SV Comet", "Union Helios"]
    assert "1 without fixture" in caplog.text
