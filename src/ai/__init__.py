"""
AI Package for Hazard Chess
Scripted opponent and the session API it plays through
"""

from .opponent import AIDifficulty, ScriptedOpponent, PIECE_VALUES
from .game_api import HazardChessAPI, GameStatus, Action

__all__ = [
    'AIDifficulty',
    'ScriptedOpponent',
    'PIECE_VALUES',
    'HazardChessAPI',
    'GameStatus',
    'Action',
]
