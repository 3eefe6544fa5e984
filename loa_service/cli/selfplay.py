#!/usr/bin/env python
"""Self-play harness for the Lines of Action engine.

Plays games from the standard setup between two engine-driven sides and
reports how they ended. Each side is either:

- ``heuristic``: the greedy one-ply :class:`HeuristicAI`;
- ``hint``: plays whatever :class:`HintAdvisor` suggests (win, then block,
  then best heuristic move).

The heuristic is deterministic, so two heuristic sides replay the same game
every time; ``--opening-random-moves`` plays that many random legal moves
(seeded by ``--seed``) before the engines take over, to get varied games.

Example usage
-------------

    # 20 games, hint-driven black against the heuristic white
    loa-selfplay --num-games 20 --black hint --white heuristic \\
        --opening-random-moves 4 --seed 7 --summary-json selfplay.json
"""

from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from collections import Counter
from typing import Dict, List, Optional

from ..ai.heuristic_ai import HeuristicAI
from ..ai.hint_advisor import HintAdvisor
from ..game_engine import GameEngine
from ..game_session import GameSession
from ..models import Move, Player

logger = logging.getLogger(__name__)

ENGINE_CHOICES = ("heuristic", "hint")


def _pick_move(engine: str, session: GameSession, player: Player) -> Optional[Move]:
    if engine == "hint":
        hint = HintAdvisor().suggest(session.board, player)
        return hint.move if hint is not None else None
    return HeuristicAI(player).select_move(session.board)


def play_game(
    black: str,
    white: str,
    max_moves: int,
    opening_random_moves: int = 0,
    rng: Optional[random.Random] = None,
) -> Dict[str, object]:
    """Play one game and return its summary record."""
    rng = rng or random.Random(0)
    session = GameSession()
    engines = {Player.BLACK: black, Player.WHITE: white}
    reason = "max_moves"

    while session.move_number < max_moves:
        player = session.current_player
        if session.move_number < opening_random_moves:
            candidates = GameEngine.get_all_legal_moves(session.board, player)
            move = rng.choice(candidates) if candidates else None
        else:
            move = _pick_move(engines[player], session, player)

        if move is None:
            reason = "stalled"
            logger.warning("%s has no legal moves at move %d", player.value, session.move_number)
            break

        winner = session.play(move)
        if winner is not None:
            reason = "win"
            break

    return {
        "winner": session.winner.value if session.winner else None,
        "reason": reason,
        "moves": session.move_number,
        "final_board": session.board.render(),
    }


def _summarise(records: List[Dict[str, object]]) -> Dict[str, object]:
    winners = Counter(str(r["winner"]) for r in records if r["winner"])
    reasons = Counter(str(r["reason"]) for r in records)
    total_moves = sum(int(r["moves"]) for r in records)
    return {
        "games": len(records),
        "wins": dict(winners),
        "reasons": dict(reasons),
        "avg_moves": (total_moves / len(records)) if records else 0.0,
    }


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run Lines of Action engine self-play games.",
    )
    parser.add_argument(
        "--num-games",
        type=int,
        default=10,
        help="Number of games to play (default: 10).",
    )
    parser.add_argument(
        "--black",
        choices=ENGINE_CHOICES,
        default="heuristic",
        help="Engine driving black (default: heuristic).",
    )
    parser.add_argument(
        "--white",
        choices=ENGINE_CHOICES,
        default="heuristic",
        help="Engine driving white (default: heuristic).",
    )
    parser.add_argument(
        "--max-moves",
        type=int,
        default=200,
        help="Move cap per game; capped games count as 'max_moves' (default: 200).",
    )
    parser.add_argument(
        "--opening-random-moves",
        type=int,
        default=0,
        help="Random legal moves played before the engines take over (default: 0).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for the opening random moves (default: 0).",
    )
    parser.add_argument(
        "--summary-json",
        default=None,
        help="Optional path for the aggregate JSON summary.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    rng = random.Random(args.seed)
    records = []
    for game_index in range(args.num_games):
        record = play_game(
            args.black,
            args.white,
            args.max_moves,
            args.opening_random_moves,
            rng,
        )
        logger.info(
            "game %d: winner=%s reason=%s moves=%d",
            game_index + 1,
            record["winner"],
            record["reason"],
            record["moves"],
        )
        records.append(record)

    summary = _summarise(records)
    print(json.dumps(summary, indent=2, sort_keys=True))
    if args.summary_json:
        with open(args.summary_json, "w", encoding="utf-8") as f:
            json.dump({"summary": summary, "games": records}, f, indent=2)
    return 0


if __name__ == "__main__":
    sys.exit(main())
