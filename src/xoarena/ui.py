"""FastAPI-powered web UI for playing tic-tac-toe against a friend or the AI."""

from __future__ import annotations

import logging
import random
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException, Response
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .ai import MinimaxAI
from .game import (
    Board,
    IllegalMove,
    Outcome,
    Player,
    apply_move,
    detect_outcome,
    new_board,
    other,
)

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """One player's (or pair of players') table: board, turn, mode and tally."""

    mode: str
    ai: Optional[MinimaxAI]
    board: Board = field(default_factory=new_board)
    current_player: Player = "X"
    outcome: Outcome = field(default_factory=Outcome)
    scores: Dict[str, int] = field(
        default_factory=lambda: {"X": 0, "O": 0, "draws": 0}
    )
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    ai_pending: bool = False
    round: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def reset_round(self) -> None:
        self.board = new_board()
        self.current_player = "X"
        self.outcome = Outcome()
        self.move_log = []
        self.ai_pending = False
        self.round += 1

    def play(self, index: int) -> None:
        """Place the current player's mark and settle the tally if the game ends."""
        if not self.outcome.in_progress:
            raise ValueError("Game already finished")
        player = self.current_player
        self.board = apply_move(self.board, index, player)
        self.move_log.append({"player": player, "cellIndex": index})
        self.outcome = detect_outcome(self.board)
        if self.outcome.winner:
            self.scores[self.outcome.winner] += 1
        elif self.outcome.drawn:
            self.scores["draws"] += 1
        else:
            self.current_player = other(player)


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="XO Arena", description="Tic-tac-toe played in the browser")


ALLOWED_MODES: Tuple[str, ...] = ("pvp", "ai")
AI_THINK_DELAY: Tuple[float, float] = (0.6, 0.6)


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    mode: str = Field(
        default="ai",
        description="'pvp' for two players on one screen, 'ai' to play O against the AI",
    )

    @field_validator("mode")
    @classmethod
    def ensure_supported_mode(cls, value: str) -> str:
        if value not in ALLOWED_MODES:
            raise ValueError(
                f"Unsupported game mode {value!r}. "
                f"Choose one of {', '.join(ALLOWED_MODES)}."
            )
        return value


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    model_config = ConfigDict(populate_by_name=True)

    cell_index: int = Field(alias="cellIndex", ge=0, le=8)


def _create_session(mode: str) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    ai = MinimaxAI(player="O") if mode == "ai" else None
    session = GameSession(mode=mode, ai=ai)
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info("Created %s game %s", mode, session_id)
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _run_ai_turn(game_id: str, round_no: int) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, random.uniform(*AI_THINK_DELAY)))

    with session.lock:
        # restarted or abandoned while thinking
        if session.round != round_no or not session.ai_pending:
            return
        try:
            if not session.ai or not session.outcome.in_progress:
                return
            if session.current_player != session.ai.player:
                return
            cell_index = session.ai.choose(session.board)
            session.play(cell_index)
            logger.debug("AI played cell %d in game %s", cell_index, game_id)
            if not session.outcome.in_progress:
                logger.info(
                    "Game %s finished: %s",
                    game_id,
                    session.outcome.winner or "draw",
                )
        finally:
            session.ai_pending = False


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        outcome = session.outcome
        state: Dict[str, object] = {
            "id": game_id,
            "mode": session.mode,
            "board": [c if c in ("X", "O") else "" for c in session.board],
            "currentPlayer": session.current_player,
            "winner": outcome.winner,
            "winningLine": list(outcome.line) if outcome.line else None,
            "drawn": outcome.drawn,
            "scores": dict(session.scores),
            "moveLog": list(session.move_log),
            "aiPending": session.ai_pending,
            "lastMove": session.move_log[-1] if session.move_log else None,
        }
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    cell_index: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    with session.lock:
        if not session.outcome.in_progress:
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")

        if session.ai and session.current_player == session.ai.player:
            raise HTTPException(status_code=400, detail="It is the AI's turn")

        try:
            session.play(cell_index)
        except IllegalMove as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        if not session.outcome.in_progress:
            logger.info(
                "Game %s finished: %s", game_id, session.outcome.winner or "draw"
            )

        should_schedule_ai = bool(
            session.ai
            and session.outcome.in_progress
            and session.current_player == session.ai.player
        )
        if should_schedule_ai:
            session.ai_pending = True
        round_no = session.round

    if should_schedule_ai and background_tasks is not None:
        background_tasks.add_task(_run_ai_turn, game_id, round_no)


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    game_id, session = _create_session(request.mode)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.cell_index, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/restart")
def restart_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        session.reset_round()
    return _serialize_session(game_id, session)


@app.delete("/api/game/{game_id}", status_code=204)
def delete_game(game_id: str) -> Response:
    if SESSIONS.pop(game_id, None) is None:
        raise HTTPException(status_code=404, detail="Game not found")
    logger.info("Closed game %s", game_id)
    return Response(status_code=204)


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>XO Arena</title>
    <style>
      body { font-family: system-ui, sans-serif; background: #0a0a0f; color: #eee;
             display: flex; flex-direction: column; align-items: center; }
      #modes button, #controls button { margin: 0.25rem; padding: 0.5rem 1rem; }
      #board { display: grid; grid-template-columns: repeat(3, 6rem); gap: 0.5rem; }
      .cell { height: 6rem; font-size: 3rem; background: #1a1a24; color: #eee;
              border: 1px solid #333; border-radius: 0.75rem; }
      .cell.win { background: #2d2d44; }
      .cell.X { color: #22d3ee; }
      .cell.O { color: #e879f9; }
      #scores span { margin: 0 1rem; }
    </style>
  </head>
  <body>
    <h1>TIC TAC TOE</h1>
    <div id=\"modes\">
      <button data-mode=\"pvp\">2 players</button>
      <button data-mode=\"ai\">vs AI</button>
    </div>
    <div id=\"game\" hidden>
      <p id=\"scores\"><span>X: <b id=\"score-x\">0</b></span>
        <span>Draws: <b id=\"score-d\">0</b></span>
        <span>O: <b id=\"score-o\">0</b></span></p>
      <p id=\"status\"></p>
      <div id=\"board\"></div>
      <div id=\"controls\">
        <button id=\"restart\">New round</button>
        <button id=\"quit\">Change mode</button>
      </div>
    </div>
    <script>
      let state = null;
      let poll = null;
      const boardEl = document.getElementById('board');

      async function api(method, path, body) {
        const res = await fetch(path, {
          method,
          headers: { 'Content-Type': 'application/json' },
          body: body ? JSON.stringify(body) : undefined,
        });
        if (res.status === 204) return null;
        const payload = await res.json();
        if (!res.ok) throw new Error(payload.detail || 'Request failed');
        return payload;
      }

      function statusText(s) {
        if (s.winner) {
          if (s.mode === 'ai') return s.winner === 'X' ? 'You win!' : 'The AI wins!';
          return s.winner + ' wins!';
        }
        if (s.drawn) return 'Draw!';
        if (s.aiPending) return 'AI is thinking...';
        return s.currentPlayer + ' to move';
      }

      function render(s) {
        state = s;
        document.getElementById('score-x').textContent = s.scores.X;
        document.getElementById('score-o').textContent = s.scores.O;
        document.getElementById('score-d').textContent = s.scores.draws;
        document.getElementById('status').textContent = statusText(s);
        const finished = Boolean(s.winner) || s.drawn;
        boardEl.innerHTML = '';
        s.board.forEach((value, index) => {
          const cell = document.createElement('button');
          cell.className = 'cell ' + value;
          if (s.winningLine && s.winningLine.includes(index)) cell.classList.add('win');
          cell.textContent = value;
          cell.disabled = Boolean(value) || finished || s.aiPending;
          cell.onclick = () => play(index);
          boardEl.appendChild(cell);
        });
        if (s.aiPending && !poll) {
          poll = setInterval(async () => {
            const next = await api('GET', '/api/game/' + state.id);
            if (!next.aiPending) { clearInterval(poll); poll = null; }
            render(next);
          }, 250);
        }
      }

      async function play(index) {
        try {
          render(await api('POST', '/api/game/' + state.id + '/move', { cellIndex: index }));
        } catch (err) {
          document.getElementById('status').textContent = err.message;
        }
      }

      document.querySelectorAll('#modes button').forEach((btn) => {
        btn.onclick = async () => {
          render(await api('POST', '/api/game', { mode: btn.dataset.mode }));
          document.getElementById('modes').hidden = true;
          document.getElementById('game').hidden = false;
        };
      });
      document.getElementById('restart').onclick = async () => {
        render(await api('POST', '/api/game/' + state.id + '/restart'));
      };
      document.getElementById('quit').onclick = async () => {
        await api('DELETE', '/api/game/' + state.id);
        state = null;
        document.getElementById('modes').hidden = false;
        document.getElementById('game').hidden = true;
      };
    </script>
  </body>
</html>
"""
