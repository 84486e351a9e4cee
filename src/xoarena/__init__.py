"""XO Arena package exposing tic-tac-toe rules, the minimax AI, and the web application."""

from .ai import MinimaxAI, select_ai_move
from .game import IllegalMove, Outcome, apply_move, detect_outcome
from .ui import app

__all__ = [
    "IllegalMove",
    "MinimaxAI",
    "Outcome",
    "app",
    "apply_move",
    "detect_outcome",
    "select_ai_move",
]
