"""Exhaustive minimax AI with alpha-beta pruning for 3x3 tic-tac-toe."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence
import math

from .game import EMPTY, Player, detect_outcome, other, winning_line

WIN_SCORE = 10


def _minimax(
    cells: List[str],
    depth: int,
    maximizing: bool,
    alpha: float,
    beta: float,
    me: Player,
) -> float:
    # Terminal: scored from ``me``'s side, sooner wins and later losses preferred
    line = winning_line(cells)
    if line is not None:
        if cells[line[0]] == me:
            return WIN_SCORE - depth
        return depth - WIN_SCORE
    if EMPTY not in cells:
        return 0

    opp = other(me)
    if maximizing:
        value = -math.inf
        for i in range(9):
            if cells[i] != EMPTY:
                continue
            cells[i] = me
            score = _minimax(cells, depth + 1, False, alpha, beta, me)
            cells[i] = EMPTY
            value = max(value, score)
            alpha = max(alpha, score)
            if beta <= alpha:
                break
        return value

    value = math.inf
    for i in range(9):
        if cells[i] != EMPTY:
            continue
        cells[i] = opp
        score = _minimax(cells, depth + 1, True, alpha, beta, me)
        cells[i] = EMPTY
        value = min(value, score)
        beta = min(beta, score)
        if beta <= alpha:
            break
    return value


def select_ai_move(board: Sequence[str], player: Player = "O") -> int:
    """Pick the cell ``player`` should occupy next.

    Every empty cell is tried in ascending order and the first one with the
    strictly highest minimax value wins. The board must still be in progress.
    """
    if not detect_outcome(board).in_progress:
        raise ValueError("Game already finished")

    # private working copy, mutated and restored during the search
    cells = list(board)
    best_score = -math.inf
    best_move = -1
    for i in range(9):
        if cells[i] != EMPTY:
            continue
        cells[i] = player
        score = _minimax(cells, 0, False, -math.inf, math.inf, player)
        cells[i] = EMPTY
        if score > best_score:
            best_score, best_move = score, i
    return best_move


@dataclass
class MinimaxAI:
    """AI opponent bound to one mark; plays O unless told otherwise."""

    player: Player = "O"

    def choose(self, board: Sequence[str]) -> int:
        return select_ai_move(board, self.player)
