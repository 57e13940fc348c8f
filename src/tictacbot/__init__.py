"""tictacbot package exposing the board rules, the minimax robot, and the web application."""

from .ai import MinimaxAI, select_move
from .game import Board, InvalidMoveRequest, OutOfRangeIndex, evaluate
from .ui import app

__all__ = [
    "Board",
    "InvalidMoveRequest",
    "MinimaxAI",
    "OutOfRangeIndex",
    "app",
    "evaluate",
    "select_move",
]
