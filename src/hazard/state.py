"""
Hazard Chess - Game State
Aggregate game record and the per-ply turn state machine
"""

from collections import Counter
import random
from typing import List, Optional

from .board import Board, Piece, PieceType, PlayerColor, Square
from .engine import MoveEngine, castle_pieces
from .minefield import Minefield
from .move import CastlingRights, Move, MoveKind


class GameState:
    """
    Owns the board, the minefield and all bookkeeping for one game.

    Ledgers: ``captured_white`` holds the pieces white has taken,
    ``captured_black`` the pieces black has taken. ``mined_white`` and
    ``mined_black`` hold each side's own pieces destroyed by explosions.
    """

    DEFAULT_MINES = 12
    FIFTY_MOVE_LIMIT = 100
    REPETITION_LIMIT = 3

    def __init__(self, mine_count: int = DEFAULT_MINES, rng: Optional[random.Random] = None):
        self.board = Board()
        self.board.setup_standard()
        self.minefield = Minefield()
        self.minefield.generate(mine_count, rng if rng is not None else random.Random())

        self.to_move = PlayerColor.WHITE
        self.move_history: List[Move] = []
        self.redo_stack: List[Move] = []  # last element is the next redo
        self.captured_white: List[Piece] = []
        self.captured_black: List[Piece] = []
        self.mined_white: List[Piece] = []
        self.mined_black: List[Piece] = []
        self.castling_rights = CastlingRights()
        self.en_passant_target: Optional[Square] = None
        self.halfmove_clock = 0
        self.elapsed_seconds = 0
        self.bot_enabled = True
        self.position_history: List[str] = []
        self.position_counts: Counter = Counter()
        self.reset_position_history()

    # Setters used when restoring a saved game

    def set_elapsed_seconds(self, seconds: int):
        self.elapsed_seconds = max(0, int(seconds))

    def set_halfmove_clock(self, clock: int):
        self.halfmove_clock = max(0, int(clock))

    def set_castling_rights(self, rights: Optional[CastlingRights]):
        self.castling_rights = rights if rights is not None else CastlingRights()

    def set_move_history(self, moves: Optional[List[Move]]):
        self.move_history = list(moves or [])

    def set_redo_stack(self, moves: Optional[List[Move]]):
        """Replace the redo stack; the last element is redone first"""
        self.redo_stack = list(moves or [])

    def set_position_history(self, history: Optional[List[str]]):
        """Replace the repetition log, rebuilding the frequency table"""
        self.position_history = []
        self.position_counts = Counter()
        if not history:
            self.reset_position_history()
            return
        for position in history:
            self._add_position(position)

    # Turn application

    def apply_move(self, move: Move):
        """
        Play one ply end to end. The move is assumed legal; an empty origin
        square makes this a no-op.
        """
        moving = self.board.get_piece(move.start.row, move.start.col)
        if moving is None:
            return

        captured = self.board.get_piece(move.end.row, move.end.col)
        self._update_castling_rights(moving, move, captured)

        if move.is_castle:
            castle_pieces(self.board, moving.color, moving, move.kind == MoveKind.CASTLE_KING_SIDE)
            exploded = self._handle_mine_effects(move, moving)
            self._update_halfmove_clock(moving, False, exploded)
        else:
            captured_en_passant = self._apply_standard_move(moving, move, captured)
            exploded = self._handle_mine_effects(move, moving)
            if captured_en_passant is not None:
                self._record_capture(captured_en_passant, moving.color)
            if captured is not None:
                if exploded:
                    self._record_mine_death(captured)
                else:
                    self._record_capture(captured, moving.color)
            self._update_halfmove_clock(
                moving, captured is not None or captured_en_passant is not None, exploded)

        self._update_en_passant_target(moving, move)

        self.move_history.append(move)
        self.redo_stack.clear()
        self.to_move = self.to_move.opposite()
        self._resolve_pending_mines()
        self._add_position(self.position_hash())

    def _apply_standard_move(self, moving: Piece, move: Move, captured: Optional[Piece]) -> Optional[Piece]:
        """Move the piece; returns the pawn taken en passant, if any"""
        captured_en_passant = None
        if move.en_passant:
            captured_en_passant = self.board.remove_piece(
                move.end.row - moving.color.forward, move.end.col)
        elif captured is not None:
            self.board.remove_piece(move.end.row, move.end.col)
        self.board.remove_piece(move.start.row, move.start.col)
        to_place = Piece(moving.color, move.promotion) if move.is_promotion else moving
        self.board.set_piece(move.end.row, move.end.col, to_place)
        return captured_en_passant

    def _update_castling_rights(self, moving: Piece, move: Move, captured: Optional[Piece]):
        if moving.type == PieceType.KING:
            self.castling_rights.revoke_all(moving.color)
        elif moving.type == PieceType.ROOK:
            self.castling_rights.revoke_for_rook_square(moving.color, move.start)
        if captured is not None and captured.type == PieceType.ROOK:
            self.castling_rights.revoke_for_rook_square(captured.color, move.end)

    def _update_en_passant_target(self, moving: Piece, move: Move):
        self.en_passant_target = None
        if moving.type != PieceType.PAWN:
            return
        if abs(move.start.row - move.end.row) == 2:
            self.en_passant_target = Square((move.start.row + move.end.row) // 2, move.start.col)

    def _update_halfmove_clock(self, moving: Piece, captured_any: bool, exploded: bool):
        if moving.type == PieceType.PAWN or captured_any or exploded:
            self.halfmove_clock = 0
        else:
            self.halfmove_clock += 1

    # Mine resolution

    def _handle_mine_effects(self, move: Move, moving: Piece) -> bool:
        """
        Resolve the mine layer at the destination cell

        Returns:
            True if the moving piece was destroyed by an explosion
        """
        minefield = self.minefield
        row, col = move.end.row, move.end.col

        if minefield.has_mine(row, col) and not minefield.is_exploded(row, col):
            if minefield.is_armed(row, col):
                minefield.explode(row, col)
                self._destroy_occupant(row, col)
                return True
            minefield.arm_mine(row, col)
            return False

        if not minefield.is_revealed(row, col):
            if minefield.adjacent_mines(row, col) == 0:
                minefield.reveal_flood(row, col, moving.color)
            else:
                minefield.reveal(row, col)

        if minefield.is_revealed(row, col) and minefield.adjacent_mines(row, col) > 0:
            if self._trigger_quick_open(row, col, moving.color):
                self._destroy_occupant(row, col)
                return True
        return False

    def _trigger_quick_open(self, row: int, col: int, color: PlayerColor) -> bool:
        """
        Open every unflagged neighbour once ``color`` has flagged as many
        neighbours as the cell's number. Returns True if a mine went off.
        """
        minefield = self.minefield
        if minefield.count_flags_around(row, col, color) != minefield.adjacent_mines(row, col):
            return False

        exploded = False
        for r, c in minefield.neighbors(row, col):
            if minefield.is_flagged(r, c, color):
                continue
            if minefield.has_mine(r, c) and not minefield.is_exploded(r, c):
                minefield.explode(r, c)
                self._destroy_occupant(r, c)
                exploded = True
            else:
                minefield.reveal_flood(r, c, color)
        return exploded

    def _resolve_pending_mines(self):
        """Detonate armed mines whose countdown ran out on this ply"""
        for row, col in self.minefield.tick_armed():
            if self.minefield.has_mine(row, col) and not self.minefield.is_exploded(row, col):
                self.minefield.explode(row, col)
                self._destroy_occupant(row, col)

    def _destroy_occupant(self, row: int, col: int):
        removed = self.board.remove_piece(row, col)
        if removed is not None:
            self._record_mine_death(removed)

    # Ledgers

    def _record_capture(self, piece: Piece, capturer: PlayerColor):
        if capturer == PlayerColor.WHITE:
            self.captured_white.append(piece)
        else:
            self.captured_black.append(piece)

    def _record_mine_death(self, piece: Piece):
        if piece.color == PlayerColor.WHITE:
            self.mined_white.append(piece)
        else:
            self.mined_black.append(piece)
        self.halfmove_clock = 0

    # Move-list undo/redo

    def can_undo(self) -> bool:
        return bool(self.move_history)

    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    def undo(self) -> Optional[Move]:
        """
        Move the last ply onto the redo stack and flip the side to move.
        Board and minefield are not rewound; callers restore a snapshot.
        """
        if not self.move_history:
            return None
        last = self.move_history.pop()
        self.redo_stack.append(last)
        self.to_move = self.to_move.opposite()
        return last

    def redo(self) -> Optional[Move]:
        if not self.redo_stack:
            return None
        move = self.redo_stack.pop()
        self.move_history.append(move)
        self.to_move = self.to_move.opposite()
        return move

    # Draw detection

    def is_fifty_move_draw(self) -> bool:
        return self.halfmove_clock >= self.FIFTY_MOVE_LIMIT

    def is_threefold_repetition(self) -> bool:
        if not self.position_history:
            return False
        return self.position_counts[self.position_history[-1]] >= self.REPETITION_LIMIT

    def is_insufficient_material(self) -> bool:
        """No pawns, rooks or queens, and at most one minor piece, two
        knights, or two bishops on the same square color"""
        knights = 0
        bishop_square_colors = []
        for square, piece in self.board.pieces():
            if piece.type == PieceType.KING:
                continue
            if piece.type in (PieceType.PAWN, PieceType.ROOK, PieceType.QUEEN):
                return False
            if piece.type == PieceType.BISHOP:
                bishop_square_colors.append((square.row + square.col) % 2)
            elif piece.type == PieceType.KNIGHT:
                knights += 1

        total_minors = knights + len(bishop_square_colors)
        if total_minors <= 1:
            return True
        if total_minors == 2:
            if knights == 2:
                return True
            if len(bishop_square_colors) == 2 and bishop_square_colors[0] == bishop_square_colors[1]:
                return True
        return False

    def is_draw(self, engine: Optional[MoveEngine] = None) -> bool:
        engine = engine or MoveEngine()
        return (engine.is_stalemate(self, self.to_move)
                or self.is_threefold_repetition()
                or self.is_fifty_move_draw()
                or self.is_insufficient_material())

    # Position hashing

    def reset_position_history(self):
        self.position_history = []
        self.position_counts = Counter()
        self._add_position(self.position_hash())

    def _add_position(self, position: str):
        self.position_history.append(position)
        self.position_counts[position] += 1

    def position_hash(self) -> str:
        """
        Canonical string for repetition detection: pieces, side to move,
        castling rights, en passant square and the full mine layer.
        """
        cells = []
        for row in range(Board.SIZE):
            for col in range(Board.SIZE):
                piece = self.board.grid[row][col]
                cells.append(piece.symbol if piece is not None else '.')
        en_passant = '--'
        if self.en_passant_target is not None:
            en_passant = f"{self.en_passant_target.row}{self.en_passant_target.col}"
        return '|'.join([
            ''.join(cells),
            'w' if self.to_move == PlayerColor.WHITE else 'b',
            self.castling_rights.key(),
            en_passant,
            self.minefield.state_key(),
        ])
