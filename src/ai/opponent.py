"""
Scripted Opponent for Hazard Chess
Greedy one-ply move scorer with a minesweeper flagging heuristic
"""

from enum import Enum
import random
from typing import Dict, List, Optional

from hazard.board import Board, PieceType, PlayerColor
from hazard.engine import MoveEngine
from hazard.minefield import Minefield
from hazard.move import Move
from hazard.state import GameState


class AIDifficulty(Enum):
    """Available opponent strengths"""
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"


PIECE_VALUES = {
    PieceType.QUEEN: 9,
    PieceType.ROOK: 5,
    PieceType.BISHOP: 3,
    PieceType.KNIGHT: 3,
    PieceType.PAWN: 1,
    PieceType.KING: 20,
}

# Bonus for landing on a revealed cell, penalty for stepping into the unknown
SAFE_SQUARE_BONUS = {
    AIDifficulty.EASY: 0,
    AIDifficulty.NORMAL: 1,
    AIDifficulty.HARD: 3,
}


class ScriptedOpponent:
    """
    Picks the highest scoring legal move, breaking ties at random.
    EASY plays a uniformly random legal move and never flags.
    """

    def __init__(self, rng: Optional[random.Random] = None,
                 piece_values: Optional[Dict[PieceType, int]] = None,
                 engine: Optional[MoveEngine] = None):
        """
        Args:
            rng: Random source for move choice and tie breaks
            piece_values: Custom capture values
            engine: Rules engine used to list candidate moves
        """
        self.rng = rng if rng is not None else random.Random()
        self.piece_values = piece_values or PIECE_VALUES
        self.engine = engine or MoveEngine()

    def choose_move(self, state: GameState, difficulty: AIDifficulty) -> Optional[Move]:
        moves = self.engine.legal_moves(state)
        if not moves:
            return None
        if difficulty == AIDifficulty.EASY:
            return moves[self.rng.randrange(len(moves))]

        best_score = None
        best: List[Move] = []
        for move in moves:
            score = self.score_move(state, move, difficulty)
            if best_score is None or score > best_score:
                best_score = score
                best = [move]
            elif score == best_score:
                best.append(move)
        return best[self.rng.randrange(len(best))]

    def score_move(self, state: GameState, move: Move, difficulty: AIDifficulty) -> int:
        target = state.board.get_piece(move.end.row, move.end.col)
        score = 0
        if target is not None:
            score += self.piece_values[target.type]
        bonus = SAFE_SQUARE_BONUS[difficulty]
        if state.minefield.is_revealed(move.end.row, move.end.col):
            score += bonus
        else:
            score -= bonus
        return score

    def place_flags(self, state: GameState, difficulty: AIDifficulty,
                    color: PlayerColor = PlayerColor.BLACK) -> bool:
        """
        Flag every unknown neighbour of a numbered cell whose remaining mine
        count equals its unknown neighbour count

        Returns:
            True if any flag was placed
        """
        if difficulty == AIDifficulty.EASY:
            return False

        minefield = state.minefield
        changed = False
        for row in range(Board.SIZE):
            for col in range(Board.SIZE):
                if not minefield.is_revealed(row, col) or minefield.is_exploded(row, col):
                    continue
                required = minefield.adjacent_mines(row, col)
                if required == 0:
                    continue
                flagged = minefield.count_flags_around(row, col, color)
                unknown = self._unknown_neighbors(minefield, row, col, color)
                if unknown and required - flagged == len(unknown):
                    for r, c in unknown:
                        minefield.toggle_flag(r, c, color)
                    changed = True
        return changed

    def _unknown_neighbors(self, minefield: Minefield, row: int, col: int, color: PlayerColor):
        return [(r, c) for r, c in minefield.neighbors(row, col)
                if not minefield.is_revealed(r, c)
                and not minefield.is_exploded(r, c)
                and not minefield.is_flagged(r, c, color)]
