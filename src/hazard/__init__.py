"""
Hazard Chess package initialization
"""

from .board import Board, Piece, PieceType, PlayerColor, Square
from .engine import MoveEngine
from .minefield import Minefield
from .move import CastlingRights, Move, MoveKind
from .snapshot import GameSnapshot, load_game, save_game
from .state import GameState

__all__ = [
    'Board', 'Piece', 'PieceType', 'PlayerColor', 'Square',
    'CastlingRights', 'Move', 'MoveKind',
    'Minefield', 'MoveEngine', 'GameState',
    'GameSnapshot', 'load_game', 'save_game',
]
