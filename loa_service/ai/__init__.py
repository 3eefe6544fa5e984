"""AI implementations for Lines of Action.

    from loa_service.ai import HeuristicAI, HintAdvisor

- base.py: BaseAI abstract base class
- heuristic_ai.py: position evaluation and the greedy computer opponent
- hint_advisor.py: three-tier move suggestions for human players
"""

from loa_service.ai.base import BaseAI
from loa_service.ai.heuristic_ai import (
    HeuristicAI,
    best_scoring_move,
    evaluate_move,
    score_position,
)
from loa_service.ai.hint_advisor import HINT_MESSAGES, HintAdvisor

__all__ = [
    "BaseAI",
    "HINT_MESSAGES",
    "HeuristicAI",
    "HintAdvisor",
    "best_scoring_move",
    "evaluate_move",
    "score_position",
]
