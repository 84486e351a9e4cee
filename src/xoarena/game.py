"""Core rules for classic 3x3 tic-tac-toe: boards, outcomes and move application."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

Player = str  # "X" or "O"
Board = List[str]

EMPTY = " "
PLAYERS: Tuple[Player, Player] = ("X", "O")

WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


class IllegalMove(ValueError):
    """Raised when a move targets an occupied or non-existent cell."""


@dataclass(frozen=True)
class Outcome:
    winner: Optional[Player] = None
    line: Optional[Tuple[int, int, int]] = None
    drawn: bool = False

    @property
    def in_progress(self) -> bool:
        return self.winner is None and not self.drawn

    @classmethod
    def win(cls, player: Player, line: Tuple[int, int, int]) -> "Outcome":
        return cls(winner=player, line=line)


IN_PROGRESS = Outcome()
DRAW = Outcome(drawn=True)


def new_board() -> Board:
    return [EMPTY] * 9


def other(player: Player) -> Player:
    return "O" if player == "X" else "X"


def empty_cells(board: Sequence[str]) -> List[int]:
    return [i for i, c in enumerate(board) if c == EMPTY]


def _check_board(board: Sequence[str]) -> None:
    if len(board) != 9:
        raise ValueError(f"Board must have 9 cells, got {len(board)}")
    for c in board:
        if c != EMPTY and c not in PLAYERS:
            raise ValueError(f"Unknown cell value {c!r}")


def winning_line(board: Sequence[str]) -> Optional[Tuple[int, int, int]]:
    """First completed line in ``WINNING_LINES`` order, without validation."""
    for a, b, c in WINNING_LINES:
        v = board[a]
        if v != EMPTY and v == board[b] == board[c]:
            return (a, b, c)
    return None


def detect_outcome(board: Sequence[str]) -> Outcome:
    """Return the win, draw or in-progress state of ``board``.

    A valid game never has two winners at once, so the first matching line
    is reported.
    """
    _check_board(board)
    line = winning_line(board)
    if line is not None:
        return Outcome.win(board[line[0]], line)
    if EMPTY not in board:
        return DRAW
    return IN_PROGRESS


def apply_move(board: Sequence[str], index: int, player: Player) -> Board:
    """Return a copy of ``board`` with ``player`` placed on ``index``."""
    if player not in PLAYERS:
        raise ValueError(f"Unknown player {player!r}")
    if not 0 <= index < 9:
        raise IllegalMove(f"Cell index {index} is outside the board")
    if board[index] != EMPTY:
        raise IllegalMove("Cell already occupied")
    updated = list(board)
    updated[index] = player
    return updated
