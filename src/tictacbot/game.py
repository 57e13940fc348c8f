"""Core rules for classic 3x3 tic-tac-toe: marks, lines and outcome evaluation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

Player = str  # "O" (human, circle) or "X" (robot, cross)
Outcome = str  # one of OPEN, PLAYER_WINS, OPPONENT_WINS, TIE

EMPTY = " "
PLAYER_MARK: Player = "O"
OPPONENT_MARK: Player = "X"

OPEN: Outcome = "open"
PLAYER_WINS: Outcome = "circle"
OPPONENT_WINS: Outcome = "cross"
TIE: Outcome = "tie"

BOARD_SIZE = 9

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


class TicTacToeError(Exception):
    """Base class for errors raised by the engine and board."""


class InvalidMoveRequest(TicTacToeError, ValueError):
    """A move was requested on a resolved board or an occupied cell."""


class OutOfRangeIndex(TicTacToeError, IndexError):
    """A cell index outside 0..8 was supplied."""


def _check_size(cells: Sequence[str]) -> None:
    if len(cells) != BOARD_SIZE:
        raise ValueError(f"Board must have {BOARD_SIZE} cells, got {len(cells)}")


def winning_line(cells: Sequence[str]) -> Optional[Tuple[int, int, int]]:
    """Return the first completed line, circle checked before cross per line."""
    _check_size(cells)
    for line in WINNING_LINES:
        a, b, c = line
        for mark in (PLAYER_MARK, OPPONENT_MARK):
            if cells[a] == mark and cells[b] == mark and cells[c] == mark:
                return line
    return None


def evaluate(cells: Sequence[str]) -> Outcome:
    """
    Pure outcome check for a 9-cell board.

    Any line of circles wins for the player, any line of crosses for the
    opponent; a full board without a line is a tie, anything else is open.
    """
    line = winning_line(cells)
    if line is not None:
        return PLAYER_WINS if cells[line[0]] == PLAYER_MARK else OPPONENT_WINS
    if all(c != EMPTY for c in cells):
        return TIE
    return OPEN


def empty_cells(cells: Sequence[str]) -> List[int]:
    return [i for i, c in enumerate(cells) if c == EMPTY]


@dataclass
class Board:
    # 'X', 'O', or ' ' (space) for empty
    cells: List[str] = field(default_factory=lambda: [EMPTY] * BOARD_SIZE)

    def __post_init__(self) -> None:
        _check_size(self.cells)
        for c in self.cells:
            if c not in (EMPTY, PLAYER_MARK, OPPONENT_MARK):
                raise ValueError(f"Unknown cell value {c!r}")

    @classmethod
    def from_string(cls, text: str) -> "Board":
        """Build a board from 9 characters, '_' or '.' standing for empty."""
        return cls(cells=[EMPTY if ch in "_. " else ch for ch in text])

    def outcome(self) -> Outcome:
        return evaluate(self.cells)

    def is_full(self) -> bool:
        return all(c != EMPTY for c in self.cells)

    def available_moves(self) -> List[int]:
        return empty_cells(self.cells)

    def place(self, player: Player, idx: int) -> None:
        if player not in (PLAYER_MARK, OPPONENT_MARK):
            raise ValueError(f"Unknown mark {player!r}")
        if not 0 <= idx < BOARD_SIZE:
            raise OutOfRangeIndex(f"Cell index {idx} is outside 0..{BOARD_SIZE - 1}")
        if self.outcome() != OPEN:
            raise InvalidMoveRequest("Board already resolved")
        if self.cells[idx] != EMPTY:
            raise InvalidMoveRequest("Cell already occupied")
        self.cells[idx] = player

    def reset(self) -> None:
        self.cells[:] = [EMPTY] * BOARD_SIZE

    def clone(self) -> "Board":
        return Board(cells=self.cells.copy())
