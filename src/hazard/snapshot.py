"""
Hazard Chess - Snapshots and Persistence
Deep, independent copies of a GameState for undo/redo and save files
"""

from dataclasses import dataclass, field
import json
import os
import random
from typing import Any, Dict, List, Optional

import numpy as np

from .board import Board, Piece, PieceType, PlayerColor, Square
from .minefield import Minefield
from .move import CastlingRights, Move
from .state import GameState


def _empty_grid(dtype) -> np.ndarray:
    return np.zeros((Minefield.SIZE, Minefield.SIZE), dtype=dtype)


def piece_to_dict(piece: Piece) -> Dict[str, str]:
    return {"color": piece.color.value, "type": piece.type.value}


def piece_from_dict(data: Any) -> Optional[Piece]:
    """Build a Piece, or None if the entry is malformed"""
    try:
        return Piece(PlayerColor(data["color"]), PieceType(data["type"]))
    except (KeyError, TypeError, ValueError):
        return None


def move_to_dict(move: Move) -> Dict[str, Any]:
    return {
        "from_row": move.start.row,
        "from_col": move.start.col,
        "to_row": move.end.row,
        "to_col": move.end.col,
        "castle_king_side": move.castle_king_side,
        "castle_queen_side": move.castle_queen_side,
        "en_passant": move.en_passant,
        "promotion": move.promotion.value if move.promotion else None,
    }


def move_from_dict(data: Any) -> Optional[Move]:
    """Build a Move, or None if the entry is malformed"""
    try:
        promotion = data.get("promotion")
        return Move(
            Square(int(data["from_row"]), int(data["from_col"])),
            Square(int(data["to_row"]), int(data["to_col"])),
            castle_king_side=bool(data.get("castle_king_side", False)),
            castle_queen_side=bool(data.get("castle_queen_side", False)),
            en_passant=bool(data.get("en_passant", False)),
            promotion=PieceType(promotion) if promotion else None,
        )
    except (AttributeError, KeyError, TypeError, ValueError):
        return None


def _restore_list(entries: Any, parse) -> list:
    if not isinstance(entries, list):
        return []
    restored = [parse(entry) for entry in entries]
    return [item for item in restored if item is not None]


def _int_or(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass
class GameSnapshot:
    """Every field of a GameState, copied so it shares nothing with its source"""
    to_move: PlayerColor = PlayerColor.WHITE
    board: List[List[Optional[Piece]]] = field(
        default_factory=lambda: [[None] * Board.SIZE for _ in range(Board.SIZE)])
    mines: np.ndarray = field(default_factory=lambda: _empty_grid(bool))
    revealed: np.ndarray = field(default_factory=lambda: _empty_grid(bool))
    exploded: np.ndarray = field(default_factory=lambda: _empty_grid(bool))
    flagged_white: np.ndarray = field(default_factory=lambda: _empty_grid(bool))
    flagged_black: np.ndarray = field(default_factory=lambda: _empty_grid(bool))
    armed_turns: np.ndarray = field(default_factory=lambda: _empty_grid(int))
    castling_rights: CastlingRights = field(default_factory=CastlingRights)
    en_passant_target: Optional[Square] = None
    move_history: List[Move] = field(default_factory=list)
    redo_stack: List[Move] = field(default_factory=list)
    captured_white: List[Piece] = field(default_factory=list)
    captured_black: List[Piece] = field(default_factory=list)
    mined_white: List[Piece] = field(default_factory=list)
    mined_black: List[Piece] = field(default_factory=list)
    elapsed_seconds: int = 0
    bot_enabled: bool = True
    halfmove_clock: int = 0
    position_history: List[str] = field(default_factory=list)

    @classmethod
    def from_state(cls, state: GameState) -> 'GameSnapshot':
        minefield = state.minefield
        return cls(
            to_move=state.to_move,
            board=[list(row) for row in state.board.grid],
            mines=minefield.mines.copy(),
            revealed=minefield.revealed.copy(),
            exploded=minefield.exploded.copy(),
            flagged_white=minefield.flagged_white.copy(),
            flagged_black=minefield.flagged_black.copy(),
            armed_turns=minefield.armed_turns.copy(),
            castling_rights=state.castling_rights.copy(),
            en_passant_target=state.en_passant_target,
            move_history=list(state.move_history),
            redo_stack=list(state.redo_stack),
            captured_white=list(state.captured_white),
            captured_black=list(state.captured_black),
            mined_white=list(state.mined_white),
            mined_black=list(state.mined_black),
            elapsed_seconds=state.elapsed_seconds,
            bot_enabled=state.bot_enabled,
            halfmove_clock=state.halfmove_clock,
            position_history=list(state.position_history),
        )

    def to_game_state(self) -> GameState:
        """Rebuild a fresh GameState; the snapshot stays reusable"""
        state = GameState(0, random.Random(0))
        state.board.clear()
        for row in range(min(Board.SIZE, len(self.board))):
            cells = self.board[row] or []
            for col in range(min(Board.SIZE, len(cells))):
                if cells[col] is not None:
                    state.board.set_piece(row, col, cells[col])

        state.minefield.set_state(self.mines, self.revealed, self.exploded,
                                  self.flagged_white, self.flagged_black, self.armed_turns)
        state.set_castling_rights(self.castling_rights.copy())
        state.en_passant_target = self.en_passant_target
        state.to_move = self.to_move
        state.set_move_history(self.move_history)
        state.set_redo_stack(self.redo_stack)
        state.captured_white = list(self.captured_white)
        state.captured_black = list(self.captured_black)
        state.mined_white = list(self.mined_white)
        state.mined_black = list(self.mined_black)
        state.set_elapsed_seconds(self.elapsed_seconds)
        state.bot_enabled = self.bot_enabled
        state.set_halfmove_clock(self.halfmove_clock)
        state.set_position_history(self.position_history)
        return state

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        rights = self.castling_rights
        return {
            "to_move": self.to_move.value,
            "board": [[piece_to_dict(piece) if piece else None for piece in row]
                      for row in self.board],
            "mines": self.mines.tolist(),
            "revealed": self.revealed.tolist(),
            "exploded": self.exploded.tolist(),
            "flagged_white": self.flagged_white.tolist(),
            "flagged_black": self.flagged_black.tolist(),
            "armed_turns": self.armed_turns.tolist(),
            "white_king_side": rights.white_king_side,
            "white_queen_side": rights.white_queen_side,
            "black_king_side": rights.black_king_side,
            "black_queen_side": rights.black_queen_side,
            "en_passant_row": self.en_passant_target.row if self.en_passant_target else None,
            "en_passant_col": self.en_passant_target.col if self.en_passant_target else None,
            "move_history": [move_to_dict(move) for move in self.move_history],
            "redo_stack": [move_to_dict(move) for move in self.redo_stack],
            "captured_white": [piece_to_dict(piece) for piece in self.captured_white],
            "captured_black": [piece_to_dict(piece) for piece in self.captured_black],
            "mined_white": [piece_to_dict(piece) for piece in self.mined_white],
            "mined_black": [piece_to_dict(piece) for piece in self.mined_black],
            "elapsed_seconds": self.elapsed_seconds,
            "bot_enabled": self.bot_enabled,
            "halfmove_clock": self.halfmove_clock,
            "position_history": list(self.position_history),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameSnapshot':
        """
        Create from dictionary, recovering what it can.

        Missing or malformed grids become all-false/all-zero, malformed
        pieces and moves are dropped, and the older single ``flagged`` grid
        is read as white's flags.
        """
        snapshot = cls()
        try:
            snapshot.to_move = PlayerColor(data.get("to_move", "white"))
        except ValueError:
            snapshot.to_move = PlayerColor.WHITE

        board = data.get("board")
        if isinstance(board, list):
            for row, cells in enumerate(board[:Board.SIZE]):
                if not isinstance(cells, list):
                    continue
                for col, cell in enumerate(cells[:Board.SIZE]):
                    if cell is not None:
                        snapshot.board[row][col] = piece_from_dict(cell)

        # The mine layout only makes sense as a complete set
        mines = Minefield.as_grid(data.get("mines"), bool)
        revealed = Minefield.as_grid(data.get("revealed"), bool)
        exploded = Minefield.as_grid(data.get("exploded"), bool)
        if mines is not None and revealed is not None and exploded is not None:
            snapshot.mines, snapshot.revealed, snapshot.exploded = mines, revealed, exploded

        white_flags = data.get("flagged_white")
        if white_flags is None:
            white_flags = data.get("flagged")
        for name, source, dtype in (("flagged_white", white_flags, bool),
                                    ("flagged_black", data.get("flagged_black"), bool),
                                    ("armed_turns", data.get("armed_turns"), int)):
            grid = Minefield.as_grid(source, dtype)
            if grid is not None:
                setattr(snapshot, name, grid)

        snapshot.castling_rights = CastlingRights(
            data.get("white_king_side") is not False,
            data.get("white_queen_side") is not False,
            data.get("black_king_side") is not False,
            data.get("black_queen_side") is not False,
        )
        if data.get("en_passant_row") is not None and data.get("en_passant_col") is not None:
            try:
                snapshot.en_passant_target = Square(int(data["en_passant_row"]),
                                                    int(data["en_passant_col"]))
            except (TypeError, ValueError):
                snapshot.en_passant_target = None

        snapshot.move_history = _restore_list(data.get("move_history"), move_from_dict)
        snapshot.redo_stack = _restore_list(data.get("redo_stack"), move_from_dict)
        snapshot.captured_white = _restore_list(data.get("captured_white"), piece_from_dict)
        snapshot.captured_black = _restore_list(data.get("captured_black"), piece_from_dict)
        snapshot.mined_white = _restore_list(data.get("mined_white"), piece_from_dict)
        snapshot.mined_black = _restore_list(data.get("mined_black"), piece_from_dict)
        snapshot.elapsed_seconds = max(0, _int_or(data.get("elapsed_seconds"), 0))
        snapshot.bot_enabled = bool(data.get("bot_enabled", True))
        snapshot.halfmove_clock = max(0, _int_or(data.get("halfmove_clock"), 0))
        history = data.get("position_history")
        if isinstance(history, list):
            snapshot.position_history = [entry for entry in history if isinstance(entry, str)]
        return snapshot


def save_game(state: GameState, path: str) -> bool:
    """Write the game to a JSON file; returns False on I/O failure"""
    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(GameSnapshot.from_state(state).to_dict(), f, indent=2)
        return True
    except OSError as e:
        print(f"Error saving game: {e}")
        return False


def load_game(path: str) -> Optional[GameState]:
    """Read a game written by ``save_game``; None if absent or unreadable"""
    if not os.path.exists(path):
        return None
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        print(f"Error loading game: {e}")
        return None
    if not isinstance(data, dict):
        print(f"Error loading game: unexpected content in {path}")
        return None
    return GameSnapshot.from_dict(data).to_game_state()
