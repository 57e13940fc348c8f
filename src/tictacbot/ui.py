"""FastAPI-powered web UI for playing tic-tac-toe against the robot."""

from __future__ import annotations

import logging
import os
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field

from .ai import MinimaxAI
from .game import (
    OPEN,
    OPPONENT_MARK,
    OPPONENT_WINS,
    PLAYER_MARK,
    PLAYER_WINS,
    TIE,
    Board,
    Player,
    TicTacToeError,
    winning_line,
)

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """Container for an active game, the robot opponent and the turn flag."""

    board: Board
    ai: MinimaxAI
    current_player: Player = PLAYER_MARK
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    ai_pending: bool = False
    # Bumped on "play again" so a robot turn scheduled earlier is dropped.
    round: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="tictacbot", description="Tic-tac-toe against an unbeatable robot")


DEFAULT_AI_THINK_DELAY = 0.5


def _read_think_delay(raw: Optional[str]) -> float:
    """Parse ``TICTACBOT_AI_DELAY``; a malformed value falls back to the default."""

    if raw is None:
        return DEFAULT_AI_THINK_DELAY
    try:
        return max(0.0, float(raw))
    except ValueError:
        logger.warning(
            "ignoring invalid TICTACBOT_AI_DELAY=%r, using %.1f s",
            raw,
            DEFAULT_AI_THINK_DELAY,
        )
        return DEFAULT_AI_THINK_DELAY


AI_THINK_DELAY: float = _read_think_delay(os.environ.get("TICTACBOT_AI_DELAY"))

INFO_TEXT: Dict[str, str] = {
    PLAYER_WINS: "Circle wins!",
    OPPONENT_WINS: "Cross wins!",
    TIE: "It's a tie!",
}


class MoveRequest(BaseModel):
    """Request payload for placing the player's circle."""

    model_config = ConfigDict(populate_by_name=True)

    cell_index: int = Field(alias="cellIndex", ge=0, le=8)


def _create_session() -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    session = GameSession(board=Board(), ai=MinimaxAI(player=OPPONENT_MARK))
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info("created game %s", session_id)
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _info_text(session: GameSession) -> str:
    outcome = session.board.outcome()
    if outcome != OPEN:
        return INFO_TEXT[outcome]
    if not session.move_log:
        return "Player goes first"
    if session.current_player == session.ai.player:
        return "Cross turn"
    return "Player's turn"


def _run_ai_turn(game_id: str, round_: int) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, AI_THINK_DELAY))

    with session.lock:
        if session.round != round_:
            return
        try:
            board = session.board
            if board.outcome() != OPEN:
                return
            if session.current_player != session.ai.player:
                return
            cell_index = session.ai.choose(board)
            board.place(session.ai.player, cell_index)
            session.move_log.append(
                {"player": session.ai.player, "cellIndex": cell_index}
            )
            logger.info("game %s: robot played %d", game_id, cell_index)
            outcome = board.outcome()
            if outcome == OPEN:
                session.current_player = PLAYER_MARK
            else:
                logger.info("game %s finished: %s", game_id, outcome)
        finally:
            session.ai_pending = False


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        board = session.board
        outcome = board.outcome()
        line = winning_line(board.cells)
        state: Dict[str, object] = {
            "id": game_id,
            "cells": [c if c in (PLAYER_MARK, OPPONENT_MARK) else "" for c in board.cells],
            "currentPlayer": session.current_player,
            "outcome": outcome,
            "winningLine": list(line) if line else None,
            "info": _info_text(session),
            "availableMoves": board.available_moves() if outcome == OPEN else [],
            "moveLog": list(session.move_log),
            "aiPending": session.ai_pending,
        }
        if session.move_log:
            state["lastMove"] = session.move_log[-1]
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    cell_index: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    should_schedule_ai = False
    with session.lock:
        board = session.board
        if board.outcome() != OPEN:
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending:
            raise HTTPException(status_code=400, detail="Robot is completing its move")

        if session.current_player != PLAYER_MARK:
            raise HTTPException(status_code=400, detail="It is not the player's turn")

        try:
            board.place(PLAYER_MARK, cell_index)
        except TicTacToeError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        session.move_log.append({"player": PLAYER_MARK, "cellIndex": cell_index})
        logger.info("game %s: player played %d", game_id, cell_index)

        outcome = board.outcome()
        if outcome == OPEN:
            session.current_player = session.ai.player
            session.ai_pending = True
            should_schedule_ai = True
        else:
            logger.info("game %s finished: %s", game_id, outcome)
        round_ = session.round

    if should_schedule_ai and background_tasks is not None:
        background_tasks.add_task(_run_ai_turn, game_id, round_)


def _reset_session(game_id: str, session: GameSession) -> None:
    with session.lock:
        session.board.reset()
        session.current_player = PLAYER_MARK
        session.move_log.clear()
        session.ai_pending = False
        session.round += 1
    logger.info("game %s reset", game_id)


@app.post("/api/game")
def create_game() -> Dict[str, object]:
    game_id, session = _create_session()
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


@app.post("/api/game/{game_id}/reset")
def reset_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    _reset_session(game_id, session)
    return _serialize_session(game_id, session)


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>tictacbot</title>
    <style>
      :root {
        color-scheme: light;
        font-family: system-ui, -apple-system, BlinkMacSystemFont, \"Segoe UI\", sans-serif;
      }
      body {
        margin: 0;
        min-height: 100vh;
        display: flex;
        flex-direction: column;
        align-items: center;
        justify-content: center;
        background: radial-gradient(circle at top, #f2f5ff, #dbe0ff 40%, #cfd8ff 70%);
        color: #13203a;
      }
      h1 {
        margin: 0 0 0.5rem;
        letter-spacing: 0.06em;
      }
      .info {
        font-size: 1.2rem;
        font-weight: 600;
        min-height: 1.5rem;
        margin-bottom: 1rem;
      }
      #message {
        min-height: 1.25rem;
        color: #b00020;
        font-weight: 600;
        margin-bottom: 0.75rem;
      }
      #game-board {
        display: grid;
        grid-template-columns: repeat(3, 100px);
        grid-template-rows: repeat(3, 100px);
        gap: 6px;
      }
      .square {
        background: white;
        border-radius: 10px;
        border: 2px solid rgba(80, 100, 160, 0.25);
        display: grid;
        place-items: center;
        cursor: pointer;
      }
      .square.filled,
      .square.locked {
        cursor: default;
      }
      .square.win {
        box-shadow: 0 0 0 3px rgba(58, 102, 255, 0.55);
      }
      .circle {
        width: 60px;
        height: 60px;
        border-radius: 50%;
        border: 10px solid #3a66ff;
        box-sizing: border-box;
      }
      .cross {
        font-size: 72px;
        font-weight: 700;
        line-height: 1;
        color: #f04a6a;
      }
      .play-again-btn {
        display: none;
        margin-top: 1.25rem;
        font-size: 1rem;
        padding: 0.55rem 1.2rem;
        border-radius: 999px;
        border: 1px solid rgba(60, 70, 120, 0.25);
        background: white;
        cursor: pointer;
      }
    </style>
  </head>
  <body>
    <h1>Tic Tac Toe</h1>
    <p class=\"info\"></p>
    <div id=\"message\"></div>
    <div id=\"game-board\"></div>
    <button class=\"play-again-btn\" type=\"button\">Play again</button>
    <script>
      const boardEl = document.querySelector('#game-board');
      const infoEl = document.querySelector('.info');
      const messageEl = document.querySelector('#message');
      const playAgainBtn = document.querySelector('.play-again-btn');
      let gameId = null;
      let gameState = null;
      let pollHandle = null;
      let isRequestPending = false;

      for (let index = 0; index < 9; index += 1) {
        const square = document.createElement('div');
        square.classList.add('square');
        square.dataset.index = String(index);
        square.addEventListener('click', () => sendMove(index));
        boardEl.append(square);
      }

      function isOver() {
        return gameState && gameState.outcome !== 'open';
      }

      function render() {
        if (!gameState) return;
        infoEl.textContent = gameState.info;
        const winning = new Set(gameState.winningLine || []);
        boardEl.querySelectorAll('.square').forEach((square, index) => {
          square.innerHTML = '';
          square.classList.remove('filled', 'locked', 'win');
          const mark = gameState.cells[index];
          if (mark === 'O') {
            const circle = document.createElement('div');
            circle.classList.add('circle');
            square.append(circle);
          } else if (mark === 'X') {
            const cross = document.createElement('div');
            cross.classList.add('cross');
            cross.textContent = '×';
            square.append(cross);
          }
          if (mark) square.classList.add('filled');
          if (isOver() || gameState.aiPending) square.classList.add('locked');
          if (winning.has(index)) square.classList.add('win');
        });
        playAgainBtn.style.display = isOver() ? 'block' : 'none';
      }

      function setState(data) {
        gameId = data.id;
        gameState = data;
        render();
        if (gameState.aiPending && !isOver()) {
          if (pollHandle === null) pollHandle = window.setTimeout(poll, 300);
        } else if (pollHandle !== null) {
          clearTimeout(pollHandle);
          pollHandle = null;
        }
      }

      async function poll() {
        pollHandle = null;
        if (!gameId) return;
        try {
          const response = await fetch(`/api/game/${gameId}`);
          if (response.ok) setState(await response.json());
        } catch (error) {
          console.error('Polling failed', error);
        }
      }

      async function startGame() {
        const response = await fetch('/api/game', { method: 'POST' });
        setState(await response.json());
      }

      async function sendMove(cellIndex) {
        if (!gameState || isOver() || gameState.aiPending || isRequestPending) return;
        if (gameState.cells[cellIndex]) return;
        isRequestPending = true;
        messageEl.textContent = '';
        try {
          const response = await fetch(`/api/game/${gameId}/move`, {
            method: 'POST',
            headers: { 'Content-Type': 'application/json' },
            body: JSON.stringify({ cellIndex }),
          });
          const payload = await response.json().catch(() => ({}));
          if (!response.ok) {
            messageEl.textContent = payload?.detail || 'Invalid move';
            return;
          }
          setState(payload);
        } catch (error) {
          messageEl.textContent = 'Network error. Please try again.';
        } finally {
          isRequestPending = false;
        }
      }

      playAgainBtn.addEventListener('click', async () => {
        if (!gameId) return;
        const response = await fetch(`/api/game/${gameId}/reset`, { method: 'POST' });
        messageEl.textContent = '';
        setState(await response.json());
      });

      startGame();
    </script>
  </body>
</html>
"""
