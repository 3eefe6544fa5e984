"""Prometheus metrics for the Lines of Action service.

This module centralises counters and histograms so that the game endpoints
can record lightweight telemetry without each handler having to manage its
own metric instances.
"""

from __future__ import annotations

from typing import Final

from prometheus_client import Counter, Gauge, Histogram


AI_MOVE_REQUESTS: Final[Counter] = Counter(
    "loa_ai_move_requests_total",
    "Total number of computer move requests, labeled by outcome.",
    labelnames=("outcome",),
)

AI_MOVE_LATENCY: Final[Histogram] = Histogram(
    "loa_ai_move_latency_seconds",
    "Time spent choosing a computer move, in seconds.",
    # The greedy search is one ply, so everything above a second is
    # pathological.
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 1.0),
)

HINT_REQUESTS: Final[Counter] = Counter(
    "loa_hint_requests_total",
    "Total hint requests, labeled by the tier that produced the hint.",
    labelnames=("category",),
)

HINT_LATENCY: Final[Histogram] = Histogram(
    "loa_hint_latency_seconds",
    "Time spent computing a hint, in seconds.",
    buckets=(0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

MOVES_COMMITTED: Final[Counter] = Counter(
    "loa_moves_committed_total",
    "Total committed moves, labeled by the moving player.",
    labelnames=("player",),
)

ILLEGAL_MOVE_ATTEMPTS: Final[Counter] = Counter(
    "loa_illegal_move_attempts_total",
    "Total moves rejected by a session, labeled by error code.",
    labelnames=("code",),
)

GAME_OUTCOMES: Final[Counter] = Counter(
    "loa_game_outcomes_total",
    "Total finished games, labeled by winner.",
    labelnames=("winner",),
)

ACTIVE_GAMES: Final[Gauge] = Gauge(
    "loa_active_games",
    "Current number of live game sessions in this process.",
)
