from collections import Counter

import pytest
from pydantic import ValidationError

from startelf.api import run_optimization
from startelf.api.schemas import OptimizeRequest
from startelf.ingest import parse_dataset


def _payload() -> dict:
    players = []
    idx = 1
    for team, bump in (("FC Atlas", 0), ("SV Comet", 2)):
        for position, count, cost in (("GK", 2, 4_000_000), ("DEF", 6, 5_000_000), ("MID", 6, 7_000_000), ("FWD", 4, 9_000_000)):
            for i in range(count):
                players.append(
                    {
                        "id": f"{team[:2].lower()}-{idx}",
                        "name": f"{team} {position} {i}",
                        "position": position,
                        "verein": team,
                        "kosten": cost + i * 500_000,
                        "punkte_hist": [40 + bump + i * 3, 44 + i * 2, 50 + bump + i],
                        "minutes_hist": [90, 90, 80],
                    }
                )
                idx += 1
    return {
        "players": players,
        "matches": [{"id": "m1", "spieltag": 1, "heim": "FC Atlas", "auswaerts": "SV Comet"}],
        "odds": [{"matchId": "m1", "heim": 1.9, "unentschieden": 3.5, "auswaerts": 4.2}],
    }


def _dataset():
    dataset, _ = parse_dataset(_payload())
    return dataset


def test_request_accepts_camel_case_and_defaults():
    request = OptimizeRequest.model_validate(
        {"budget": 100_000_000, "formation": "4-4-2", "baseMode": "last3", "weights": {"w_odds": 0.0}}
    )
    params = request.to_params()

    assert request.forced_formation == "4-4-2"
    assert request.blacklist == []
    assert params.base_mode == "last3"
    assert params.w_odds == 0.0
    assert params.w_base == pytest.approx(1.0)


@pytest.mark.parametrize(
    "payload",
    [
        {"budget": 0},
        {"budget": 100, "formation": "2-2-6"},
        {"budget": 100, "baseMode": "median"},
        {"budget": 100, "weights": {"w_form": -1}},
        {"budget": 100, "round": 0},
    ],
)
def test_request_rejects_invalid_input(payload):
    with pytest.raises(ValidationError):
        OptimizeRequest.model_validate(payload)


def test_run_optimization_auto_returns_response():
    request = OptimizeRequest(budget=120_000_000, blacklist=["fc-1"])
    response = run_optimization(request, _dataset())

    assert response is not None
    assert len(response.lineup) == 11
    counts = Counter(pick.position for pick in response.lineup)
    assert counts["GK"] == 1
    assert "fc-1" not in {pick.player_id for pick in response.lineup}
    total = sum(pick.cost for pick in response.lineup)
    assert response.restbudget == pytest.approx(120_000_000 - total)
    assert response.objective == pytest.approx(sum(pick.p_pred for pick in response.lineup))


def test_run_optimization_forced_formation():
    request = OptimizeRequest(budget=120_000_000, formation="5-4-1")
    response = run_optimization(request, _dataset())

    assert response is not None
    assert response.formation == "5-4-1"
    counts = Counter(pick.position for pick in response.lineup)
    assert (counts["DEF"], counts["MID"], counts["FWD"]) == (5, 4, 1)


def test_run_optimization_infeasible_returns_none():
    request = OptimizeRequest(budget=10_000_000)
    assert run_optimization(request, _dataset()) is None
