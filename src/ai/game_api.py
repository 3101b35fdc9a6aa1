"""
Hazard Chess Game API
Session facade used by players and the scripted opponent: validated
actions, snapshot-based undo/redo, flag ownership and game status
"""

from enum import Enum
import random
from typing import Any, Dict, List, Optional

import numpy as np

from hazard.board import Board, PieceType, PlayerColor, Square
from hazard.engine import MoveEngine
from hazard.move import Move
from hazard.snapshot import GameSnapshot
from hazard.state import GameState

from .opponent import AIDifficulty, ScriptedOpponent


class Action(Enum):
    """Actions recorded in the session history"""
    MOVE = "move"
    FLAG = "flag"
    BOT = "bot"


class GameStatus(Enum):
    """Enumeration for the outcome shown to the players"""
    IN_PROGRESS = "in_progress"
    CHECK = "check"
    WHITE_WINS = "white_wins"
    BLACK_WINS = "black_wins"
    DRAW = "draw"


PIECE_CODES = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 2,
    PieceType.BISHOP: 3,
    PieceType.ROOK: 4,
    PieceType.QUEEN: 5,
    PieceType.KING: 6,
}


class HazardChessAPI:
    """
    API for players and bots to interact with a Hazard Chess game.
    Every state-changing action pushes a snapshot so it can be undone.
    """

    DEFAULT_MINES = 14

    def __init__(self, mine_count: int = DEFAULT_MINES,
                 difficulty: AIDifficulty = AIDifficulty.NORMAL,
                 bot_enabled: bool = True,
                 rng: Optional[random.Random] = None):
        """
        Initialize the game API

        Args:
            mine_count: Number of mines to place in each new game
            difficulty: Strength of the scripted opponent
            bot_enabled: Whether black is played by the scripted opponent
            rng: Random source shared by mine placement and the opponent
        """
        self.mine_count = mine_count
        self.difficulty = difficulty
        self.rng = rng if rng is not None else random.Random()
        self.engine = MoveEngine()
        self.opponent = ScriptedOpponent(self.rng, engine=self.engine)
        self.undo_stack: List[GameSnapshot] = []
        self.redo_stack: List[GameSnapshot] = []
        self.action_history: List[Dict[str, Any]] = []
        self.state = GameState(mine_count, self.rng)
        self.state.bot_enabled = bot_enabled

    def reset_game(self) -> Dict[str, Any]:
        """
        Start a new game with the same settings

        Returns:
            Initial game state
        """
        bot_enabled = self.state.bot_enabled
        self.state = GameState(self.mine_count, self.rng)
        self.state.bot_enabled = bot_enabled
        self.undo_stack.clear()
        self.redo_stack.clear()
        self.action_history.clear()
        return self.get_game_state()

    def load_state(self, state: GameState):
        """Continue from a restored game; undo history starts empty"""
        self.state = state
        self.undo_stack.clear()
        self.redo_stack.clear()

    # Actions

    def make_move(self, start: Square, end: Square,
                  promotion: Optional[PieceType] = None) -> Dict[str, Any]:
        """
        Play a move for the side to move

        Args:
            start: Square of the piece to move
            end: Destination square (the king's destination when castling)
            promotion: Piece to promote to; queen if omitted

        Returns:
            Result dict with success flag and updated state
        """
        if self.is_game_over():
            return self._failure(Action.MOVE, "Game is over")

        move = self.resolve_move(start, end, promotion)
        if move is None:
            return self._failure(Action.MOVE, f"Illegal move: {start} -> {end}")

        self._apply(move, Action.MOVE)
        return self._success(Action.MOVE, move)

    def resolve_move(self, start: Square, end: Square,
                     promotion: Optional[PieceType] = None) -> Optional[Move]:
        """Find the legal move matching a start/end pair"""
        candidates = [move for move in self.engine.legal_moves(self.state, start)
                      if move.end == end]
        if not candidates:
            return None
        if len(candidates) == 1:
            return candidates[0]
        wanted = promotion or PieceType.QUEEN
        for move in candidates:
            if move.promotion == wanted:
                return move
        return None

    def flag_owner(self) -> PlayerColor:
        """Against the bot the human always plays white"""
        return PlayerColor.WHITE if self.state.bot_enabled else self.state.to_move

    def toggle_flag(self, row: int, col: int) -> Dict[str, Any]:
        """Toggle the current flag owner's flag on a cell"""
        if not Board.is_inside(row, col):
            return self._failure(Action.FLAG, f"Invalid coordinates: ({row}, {col})")
        if self.is_game_over():
            return self._failure(Action.FLAG, "Game is over")

        minefield = self.state.minefield
        if minefield.is_revealed(row, col) and not minefield.is_exploded(row, col):
            return self._failure(Action.FLAG, f"Cell ({row}, {col}) is already revealed")

        self._push_undo()
        minefield.toggle_flag(row, col, self.flag_owner())
        self.action_history.append({
            'action': Action.FLAG.value,
            'coordinates': (row, col),
            'color': self.flag_owner().value,
            'success': True,
        })
        return {'success': True, 'action': Action.FLAG.value, 'state': self.get_game_state()}

    def bot_turn(self) -> Dict[str, Any]:
        """Let the scripted opponent flag cells and move for black"""
        if not self.state.bot_enabled:
            return self._failure(Action.BOT, "Bot is disabled")
        if self.state.to_move != PlayerColor.BLACK:
            return self._failure(Action.BOT, "Not the bot's turn")
        if self.is_game_over():
            return self._failure(Action.BOT, "Game is over")

        self.opponent.place_flags(self.state, self.difficulty, PlayerColor.BLACK)
        move = self.opponent.choose_move(self.state, self.difficulty)
        if move is None:
            return self._failure(Action.BOT, "No legal moves")

        self._apply(move, Action.BOT)
        return self._success(Action.BOT, move)

    def _apply(self, move: Move, action: Action):
        self._push_undo()
        self.state.apply_move(move)
        self.action_history.append({
            'action': action.value,
            'move': move,
            'success': True,
            'status_after': self.get_status().value,
        })

    def _push_undo(self):
        self.undo_stack.append(GameSnapshot.from_state(self.state))
        self.redo_stack.clear()

    def _success(self, action: Action, move: Move) -> Dict[str, Any]:
        return {
            'success': True,
            'action': action.value,
            'move': move,
            'state': self.get_game_state(),
        }

    def _failure(self, action: Action, error: str) -> Dict[str, Any]:
        self.action_history.append({'action': action.value, 'success': False, 'error': error})
        return {
            'success': False,
            'action': action.value,
            'error': error,
            'state': self.get_game_state(),
        }

    # Undo / redo

    def can_undo(self) -> bool:
        return bool(self.undo_stack)

    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    def undo(self) -> bool:
        if not self.undo_stack:
            return False
        self.redo_stack.append(GameSnapshot.from_state(self.state))
        self.state = self.undo_stack.pop().to_game_state()
        return True

    def redo(self) -> bool:
        if not self.redo_stack:
            return False
        self.undo_stack.append(GameSnapshot.from_state(self.state))
        self.state = self.redo_stack.pop().to_game_state()
        return True

    # Status

    def get_status(self) -> GameStatus:
        board = self.state.board
        if board.find_king(PlayerColor.BLACK) is None:
            return GameStatus.WHITE_WINS
        if board.find_king(PlayerColor.WHITE) is None:
            return GameStatus.BLACK_WINS
        to_move = self.state.to_move
        if self.engine.is_checkmate(self.state, to_move):
            return GameStatus.WHITE_WINS if to_move == PlayerColor.BLACK else GameStatus.BLACK_WINS
        if self.state.is_draw(self.engine):
            return GameStatus.DRAW
        if self.engine.is_in_check(self.state, to_move):
            return GameStatus.CHECK
        return GameStatus.IN_PROGRESS

    def is_game_over(self) -> bool:
        return self.get_status() in (GameStatus.WHITE_WINS, GameStatus.BLACK_WINS, GameStatus.DRAW)

    def set_elapsed_seconds(self, seconds: int):
        self.state.set_elapsed_seconds(seconds)

    def format_elapsed(self) -> str:
        """Format elapsed time as MM:SS"""
        minutes, seconds = divmod(self.state.elapsed_seconds, 60)
        return f"{minutes:02d}:{seconds:02d}"

    def get_game_state(self) -> Dict[str, Any]:
        """
        Summary of the current game

        Returns:
            Plain dict suitable for display or logging
        """
        state = self.state
        return {
            'to_move': state.to_move.value,
            'status': self.get_status().value,
            'move_count': len(state.move_history),
            'halfmove_clock': state.halfmove_clock,
            'elapsed': self.format_elapsed(),
            'captured_white': [piece.symbol for piece in state.captured_white],
            'captured_black': [piece.symbol for piece in state.captured_black],
            'mined_white': [piece.symbol for piece in state.mined_white],
            'mined_black': [piece.symbol for piece in state.mined_black],
            'mines_total': state.minefield.mine_count(),
            'bot_enabled': state.bot_enabled,
            'can_undo': self.can_undo(),
            'can_redo': self.can_redo(),
        }

    def get_board_array(self) -> np.ndarray:
        """
        Get the board as a numpy array, seen by the current flag owner

        Returns:
            3D numpy array: [8, 8, channels]
            Channels:
            0: Piece code (+1..+6 white pawn..king, -1..-6 black, 0 empty)
            1: Mine view (-3=hidden, -1=exploded mine, 0-8=revealed count)
            2: Own flag (0 or 1)
            3: Armed countdown
        """
        minefield = self.state.minefield
        pieces = np.zeros((Board.SIZE, Board.SIZE), dtype=np.float32)
        for square, piece in self.state.board.pieces():
            code = PIECE_CODES[piece.type]
            pieces[square.row, square.col] = code if piece.color == PlayerColor.WHITE else -code

        mine_view = np.where(minefield.revealed, minefield.adjacent_counts, -3).astype(np.float32)
        mine_view[minefield.exploded & minefield.mines] = -1

        owner = self.flag_owner()
        flags = minefield.flagged_white if owner == PlayerColor.WHITE else minefield.flagged_black

        return np.stack([pieces, mine_view, flags.astype(np.float32),
                         minefield.armed_turns.astype(np.float32)], axis=-1)

    def get_action_history(self) -> List[Dict[str, Any]]:
        return self.action_history.copy()
