"""
Smoke tests for the self-play harness.
"""

import json
import random

from loa_service.cli.selfplay import _summarise, main, play_game


def test_play_game_respects_move_cap():
    record = play_game("heuristic", "heuristic", max_moves=6)
    assert record["reason"] in ("win", "stalled", "max_moves")
    assert record["moves"] <= 6
    if record["reason"] == "max_moves":
        assert record["moves"] == 6
        assert record["winner"] is None
    assert len(record["final_board"].splitlines()) == 8


def test_heuristic_games_are_deterministic():
    first = play_game("heuristic", "hint", max_moves=8)
    second = play_game("heuristic", "hint", max_moves=8)
    assert first == second


def test_random_opening_is_seeded():
    first = play_game("heuristic", "heuristic", 6, opening_random_moves=4, rng=random.Random(3))
    second = play_game("heuristic", "heuristic", 6, opening_random_moves=4, rng=random.Random(3))
    assert first["final_board"] == second["final_board"]


def test_summarise():
    summary = _summarise([
        {"winner": "black", "reason": "win", "moves": 10},
        {"winner": None, "reason": "max_moves", "moves": 20},
    ])
    assert summary == {
        "games": 2,
        "wins": {"black": 1},
        "reasons": {"win": 1, "max_moves": 1},
        "avg_moves": 15.0,
    }


def test_main_writes_summary(tmp_path, capsys):
    out = tmp_path / "selfplay.json"
    exit_code = main([
        "--num-games", "2",
        "--max-moves", "4",
        "--black", "hint",
        "--opening-random-moves", "2",
        "--summary-json", str(out),
        "--log-level", "WARNING",
    ])
    assert exit_code == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["summary"]["games"] == 2
    assert len(data["games"]) == 2
    assert json.loads(capsys.readouterr().out)["games"] == 2
