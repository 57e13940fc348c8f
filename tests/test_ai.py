"""Tests for the tic-tac-toe minimax robot."""

import random
from functools import lru_cache

import pytest

from tictacbot.ai import MinimaxAI, select_move
from tictacbot.game import (
    OPEN,
    OPPONENT_WINS,
    PLAYER_WINS,
    TIE,
    Board,
    InvalidMoveRequest,
    evaluate,
)


def _to_move(cells):
    # Circle always opens.
    return "O" if cells.count("O") == cells.count("X") else "X"


@lru_cache(maxsize=None)
def _reference_value(cells):
    """Plain minimax without pruning, cross maximizing."""
    result = evaluate(cells)
    if result != OPEN:
        return {OPPONENT_WINS: 1, PLAYER_WINS: -1, TIE: 0}[result]
    mark = _to_move(cells)
    values = [
        _reference_value(cells[:i] + (mark,) + cells[i + 1 :])
        for i, c in enumerate(cells)
        if c == " "
    ]
    return max(values) if mark == "X" else min(values)


def _reachable_cross_turns(min_marks):
    seen = set()
    frontier = [tuple(" " * 9)]
    while frontier:
        cells = frontier.pop()
        if cells in seen:
            continue
        seen.add(cells)
        if evaluate(cells) != OPEN:
            continue
        mark = _to_move(cells)
        for i, c in enumerate(cells):
            if c == " ":
                frontier.append(cells[:i] + (mark,) + cells[i + 1 :])
    return [
        cells
        for cells in seen
        if evaluate(cells) == OPEN
        and _to_move(cells) == "X"
        and 9 - cells.count(" ") >= min_marks
    ]


def test_ai_takes_immediate_win():
    board = Board.from_string("XX_OO____")
    ai = MinimaxAI(player="X", rng=random.Random(0))

    assert ai.best_moves(board) == [2]
    assert ai.score_moves(board)[2] == 1
    assert ai.choose(board) == 2


def test_ai_blocks_circle_line():
    board = Board.from_string("OO__X____")
    ai = MinimaxAI(player="X", rng=random.Random(0))

    assert ai.best_moves(board) == [2]
    assert ai.score_moves(board)[2] == 0


def test_lost_position_keeps_every_move_tied():
    # Blocking at 2 still loses to the fork at 4, so nothing beats -1.
    board = Board.from_string("OO_X_____")
    ai = MinimaxAI(player="X")

    scores = ai.score_moves(board)
    assert set(scores.values()) == {-1}
    assert ai.best_moves(board) == board.available_moves()


def test_empty_board_all_moves_draw():
    board = Board()
    ai = MinimaxAI(player="X", rng=random.Random(3))

    assert ai.score_moves(board) == {i: 0 for i in range(9)}
    assert ai.best_moves(board) == list(range(9))
    assert 0 <= ai.choose(board) <= 8


def test_circle_side_minimizes():
    board = Board.from_string("OO_XX____")
    assert select_move(board, "O", random.Random(1)) == 2


def test_board_left_unchanged_after_search():
    board = Board.from_string("O___X__O_")
    before = list(board.cells)

    move = select_move(board, "X", random.Random(5))

    assert board.cells == before
    assert before[move] == " "


def test_seeded_rng_is_reproducible():
    board = Board.from_string("O________")
    first = [select_move(board, "X", random.Random(11)) for _ in range(3)]
    second = [select_move(board, "X", random.Random(11)) for _ in range(3)]
    assert first == second


@pytest.mark.parametrize("text", ["OXOXOXXOX", "XXX_OO___", "OOO_XX_X_"])
def test_refuses_finished_board(text):
    with pytest.raises(InvalidMoveRequest):
        select_move(Board.from_string(text), "X")


def test_unknown_side_rejected():
    with pytest.raises(ValueError):
        MinimaxAI(player="Z")


def test_best_moves_match_plain_minimax():
    ai = MinimaxAI(player="X")
    for cells in _reachable_cross_turns(min_marks=3):
        board = Board(cells=list(cells))
        expected_scores = {
            i: _reference_value(cells[:i] + ("X",) + cells[i + 1 :])
            for i, c in enumerate(cells)
            if c == " "
        }
        assert ai.score_moves(board) == expected_scores
        best = max(expected_scores.values())
        assert ai.best_moves(board) == [
            i for i, v in expected_scores.items() if v == best
        ]
        assert board.cells == list(cells)


def test_robot_never_loses_to_any_circle_line():
    rng = random.Random(2024)
    outcomes = set()

    def explore(board):
        result = board.outcome()
        if result != OPEN:
            outcomes.add(result)
            return
        if _to_move(board.cells) == "O":
            for i in board.available_moves():
                child = board.clone()
                child.place("O", i)
                explore(child)
        else:
            move = select_move(board, "X", rng)
            child = board.clone()
            child.place("X", move)
            explore(child)

    explore(Board())

    assert PLAYER_WINS not in outcomes
    assert outcomes <= {TIE, OPPONENT_WINS}


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_self_play_always_ties(seed):
    rng = random.Random(seed)
    board = Board()
    while board.outcome() == OPEN:
        side = _to_move(board.cells)
        board.place(side, select_move(board, side, rng))
    assert board.outcome() == TIE
