"""Exhaustive minimax with alpha-beta pruning for the tic-tac-toe robot."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional
import logging
import math
import random

from .game import (
    EMPTY,
    OPEN,
    OPPONENT_MARK,
    OPPONENT_WINS,
    PLAYER_MARK,
    PLAYER_WINS,
    TIE,
    Board,
    InvalidMoveRequest,
    Player,
    empty_cells,
    evaluate,
)

logger = logging.getLogger(__name__)

# Terminal utilities from the cross (robot) point of view; no depth discount.
SCORES: Dict[str, int] = {
    OPPONENT_WINS: 1,
    PLAYER_WINS: -1,
    TIE: 0,
}


@dataclass
class MinimaxAI:
    """AI player that searches the whole game tree with alpha-beta pruning.

    Cross maximizes and circle minimizes. Every root move reaching the best
    score is kept, and one of them is drawn from ``rng`` so the robot does
    not always answer the same way.
    """

    player: Player = OPPONENT_MARK
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def __post_init__(self) -> None:
        if self.player not in (PLAYER_MARK, OPPONENT_MARK):
            raise ValueError(f"Unknown mark {self.player!r}")

    # ---- public API ----

    def choose(self, board: Board) -> int:
        moves = self.best_moves(board)
        move = self.rng.choice(moves)
        logger.debug("%s picks %d from tied moves %s", self.player, move, moves)
        return move

    def best_moves(self, board: Board) -> List[int]:
        """All root moves sharing the optimal score, in board order."""
        scores = self.score_moves(board)
        if self.player == OPPONENT_MARK:
            target = max(scores.values())
        else:
            target = min(scores.values())
        return [move for move, score in scores.items() if score == target]

    def score_moves(self, board: Board) -> Dict[int, int]:
        """Exact minimax value of every empty cell for ``self.player``."""
        if evaluate(board.cells) != OPEN:
            raise InvalidMoveRequest("Cannot select a move on a finished board")

        # Private working buffer; the caller's board is never touched.
        cells = list(board.cells)
        maximizing_next = self.player == PLAYER_MARK
        scores: Dict[int, int] = {}
        for i in empty_cells(cells):
            cells[i] = self.player
            try:
                scores[i] = self._minimax(cells, maximizing_next, -math.inf, math.inf)
            finally:
                cells[i] = EMPTY
        logger.debug("root scores for %s: %s", self.player, scores)
        return scores

    # ---- core search ----

    def _minimax(
        self,
        cells: List[str],
        maximizing: bool,
        alpha: float,
        beta: float,
    ) -> int:
        result = evaluate(cells)
        if result != OPEN:
            return SCORES[result]

        if maximizing:
            value = -math.inf
            for i in empty_cells(cells):
                cells[i] = OPPONENT_MARK
                try:
                    score = self._minimax(cells, False, alpha, beta)
                finally:
                    cells[i] = EMPTY
                value = max(value, score)
                alpha = max(alpha, value)
                if beta <= alpha:
                    break
        else:
            value = math.inf
            for i in empty_cells(cells):
                cells[i] = PLAYER_MARK
                try:
                    score = self._minimax(cells, True, alpha, beta)
                finally:
                    cells[i] = EMPTY
                value = min(value, score)
                beta = min(beta, value)
                if beta <= alpha:
                    break
        return int(value)


def select_move(
    board: Board, side: Player = OPPONENT_MARK, rng: Optional[random.Random] = None
) -> int:
    """Pick an optimal move for ``side``; ties are broken by ``rng``."""
    ai = MinimaxAI(player=side, rng=rng if rng is not None else random.Random())
    return ai.choose(board)
