"""
Shared fixtures for Hazard Chess tests
"""

import random

import numpy as np
import pytest

from hazard.board import PlayerColor
from hazard.move import CastlingRights
from hazard.state import GameState


def build_state(pieces=None, mines=(), to_move=PlayerColor.WHITE, castling=None):
    """
    Create a GameState with a known layout

    Args:
        pieces: {(row, col): Piece}; None keeps the standard start position
        mines: Iterable of (row, col) mine cells
        to_move: Side to move
        castling: CastlingRights; defaults to full rights for the standard
            position and no rights for a custom one
    """
    state = GameState(0, random.Random(0))
    if pieces is not None:
        state.board.clear()
        for (row, col), piece in pieces.items():
            state.board.set_piece(row, col, piece)
        if castling is None:
            castling = CastlingRights(False, False, False, False)
    if castling is not None:
        state.castling_rights = castling

    grid = np.zeros((8, 8), dtype=bool)
    for row, col in mines:
        grid[row, col] = True
    blank = np.zeros((8, 8), dtype=bool)
    state.minefield.set_state(grid, blank, blank, blank, blank, np.zeros((8, 8), dtype=int))

    state.to_move = to_move
    state.reset_position_history()
    return state


@pytest.fixture
def make_state():
    """Factory fixture for custom positions"""
    return build_state
