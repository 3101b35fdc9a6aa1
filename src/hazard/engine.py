"""
Hazard Chess - Move Engine
Legal move generation, attack detection and check/mate/stalemate queries
"""

from typing import TYPE_CHECKING, List, Optional, Tuple

from .board import Board, Piece, PieceType, PlayerColor, Square
from .move import PROMOTION_OPTIONS, Move, MoveKind

if TYPE_CHECKING:
    from .state import GameState


KNIGHT_OFFSETS = [(2, 1), (2, -1), (-2, 1), (-2, -1), (1, 2), (1, -2), (-1, 2), (-1, -2)]
KING_OFFSETS = [(-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1)]
ORTHOGONALS = [(1, 0), (-1, 0), (0, 1), (0, -1)]
DIAGONALS = [(1, 1), (1, -1), (-1, 1), (-1, -1)]

SLIDING_DIRECTIONS = {
    PieceType.BISHOP: DIAGONALS,
    PieceType.ROOK: ORTHOGONALS,
    PieceType.QUEEN: ORTHOGONALS + DIAGONALS,
}


def apply_move_to_board(board: Board, move: Move, color: PlayerColor):
    """
    Move pieces on a bare board with no mine or bookkeeping effects.
    Used to simulate a move before testing king safety.
    """
    moving = board.get_piece(move.start.row, move.start.col)
    if moving is None:
        return

    kind = move.kind
    if kind in (MoveKind.CASTLE_KING_SIDE, MoveKind.CASTLE_QUEEN_SIDE):
        castle_pieces(board, color, moving, kind == MoveKind.CASTLE_KING_SIDE)
        return

    if kind == MoveKind.EN_PASSANT:
        board.remove_piece(move.end.row - color.forward, move.end.col)
    else:
        board.remove_piece(move.end.row, move.end.col)
    board.remove_piece(move.start.row, move.start.col)
    to_place = Piece(color, move.promotion) if kind == MoveKind.PROMOTION else moving
    board.set_piece(move.end.row, move.end.col, to_place)


def castle_pieces(board: Board, color: PlayerColor, king: Piece, king_side: bool):
    """Relocate king and rook together"""
    row = color.home_row
    king_col, rook_from, rook_to = (6, 7, 5) if king_side else (2, 0, 3)
    board.remove_piece(row, 4)
    board.set_piece(row, king_col, king)
    rook = board.remove_piece(row, rook_from)
    if rook is not None:
        board.set_piece(row, rook_to, rook)


class MoveEngine:
    """
    Stateless rules engine. Every query reads a GameState and leaves it as
    it found it; mate and stalemate checks flip the side to move for the
    duration of the query only.
    """

    def legal_moves(self, state: 'GameState', start: Optional[Square] = None) -> List[Move]:
        """
        Legal moves for the side to move

        Args:
            state: Game to inspect
            start: Restrict to the piece on this square (all pieces if None)
        """
        if start is None:
            moves = []
            for square, piece in state.board.pieces():
                if piece.color == state.to_move:
                    moves.extend(self.legal_moves(state, square))
            return moves

        piece = state.board.get_piece(start.row, start.col)
        if piece is None or piece.color != state.to_move:
            return []

        minefield = state.minefield
        legal = []
        for move in self.pseudo_moves(state, start, piece):
            end = move.end
            # A side may not walk onto a hidden cell it has flagged itself
            if (minefield.is_flagged(end.row, end.col, piece.color)
                    and not minefield.is_revealed(end.row, end.col)):
                continue
            if self._is_legal_after_move(state.board, move, piece.color):
                legal.append(move)
        return legal

    def pseudo_moves(self, state: 'GameState', start: Square, piece: Piece) -> List[Move]:
        """Moves matching the piece's pattern, ignoring king safety"""
        moves: List[Move] = []
        if piece.type == PieceType.PAWN:
            self._add_pawn_moves(state, start, piece, moves)
        elif piece.type == PieceType.KNIGHT:
            self._add_step_moves(state.board, start, piece, KNIGHT_OFFSETS, moves)
        elif piece.type in SLIDING_DIRECTIONS:
            self._add_sliding_moves(state.board, start, piece, SLIDING_DIRECTIONS[piece.type], moves)
        elif piece.type == PieceType.KING:
            self._add_step_moves(state.board, start, piece, KING_OFFSETS, moves)
            self._add_castling_moves(state, piece, moves)
        else:
            raise ValueError(f"Unknown piece type: {piece.type}")
        return moves

    def _add_pawn_moves(self, state: 'GameState', start: Square, piece: Piece, moves: List[Move]):
        board = state.board
        direction = piece.color.forward
        start_row = 6 if piece.color == PlayerColor.WHITE else 1
        promotion_row = 0 if piece.color == PlayerColor.WHITE else 7

        one_row = start.row + direction
        if board.is_inside(one_row, start.col) and board.is_empty(one_row, start.col):
            self._add_pawn_target(start, Square(one_row, start.col), promotion_row, moves)
            two_row = start.row + 2 * direction
            if (start.row == start_row and board.is_inside(two_row, start.col)
                    and board.is_empty(two_row, start.col)):
                moves.append(Move(start, Square(two_row, start.col)))

        for dc in (-1, 1):
            row, col = one_row, start.col + dc
            if not board.is_inside(row, col):
                continue
            target = board.get_piece(row, col)
            if target is not None and target.color != piece.color:
                self._add_pawn_target(start, Square(row, col), promotion_row, moves)
            elif state.en_passant_target == Square(row, col):
                moves.append(Move(start, Square(row, col), en_passant=True))

    def _add_pawn_target(self, start: Square, end: Square, promotion_row: int, moves: List[Move]):
        if end.row == promotion_row:
            for option in PROMOTION_OPTIONS:
                moves.append(Move(start, end, promotion=option))
        else:
            moves.append(Move(start, end))

    def _add_step_moves(self, board: Board, start: Square, piece: Piece,
                        offsets: List[Tuple[int, int]], moves: List[Move]):
        for dr, dc in offsets:
            row, col = start.row + dr, start.col + dc
            if not board.is_inside(row, col):
                continue
            target = board.get_piece(row, col)
            if target is None or target.color != piece.color:
                moves.append(Move(start, Square(row, col)))

    def _add_sliding_moves(self, board: Board, start: Square, piece: Piece,
                           directions: List[Tuple[int, int]], moves: List[Move]):
        for dr, dc in directions:
            row, col = start.row + dr, start.col + dc
            while board.is_inside(row, col):
                target = board.get_piece(row, col)
                if target is None:
                    moves.append(Move(start, Square(row, col)))
                else:
                    if target.color != piece.color:
                        moves.append(Move(start, Square(row, col)))
                    break
                row += dr
                col += dc

    def _add_castling_moves(self, state: 'GameState', piece: Piece, moves: List[Move]):
        color = piece.color
        row = color.home_row
        if self.is_square_attacked(state.board, color.opposite(), Square(row, 4)):
            return
        if (state.castling_rights.can_castle(color, True)
                and self._can_castle_through(state, color, row, 5, 6, 7)):
            moves.append(Move(Square(row, 4), Square(row, 6), castle_king_side=True))
        if (state.castling_rights.can_castle(color, False)
                and self._can_castle_through(state, color, row, 3, 2, 0)):
            moves.append(Move(Square(row, 4), Square(row, 2), castle_queen_side=True))

    def _can_castle_through(self, state: 'GameState', color: PlayerColor, row: int,
                            step_col: int, dest_col: int, rook_col: int) -> bool:
        board = state.board
        if not board.is_empty(row, step_col) or not board.is_empty(row, dest_col):
            return False
        rook = board.get_piece(row, rook_col)
        if rook is None or rook.type != PieceType.ROOK or rook.color != color:
            return False
        enemy = color.opposite()
        if self.is_square_attacked(board, enemy, Square(row, step_col)):
            return False
        return not self.is_square_attacked(board, enemy, Square(row, dest_col))

    def _is_legal_after_move(self, board: Board, move: Move, color: PlayerColor) -> bool:
        scratch = board.copy()
        apply_move_to_board(scratch, move, color)
        king = scratch.find_king(color)
        if king is None:
            return False
        return not self.is_square_attacked(scratch, color.opposite(), king)

    def is_square_attacked(self, board: Board, attacker: PlayerColor, target: Square) -> bool:
        """Whether any ``attacker`` piece attacks ``target``"""
        # Pawns attack diagonally forward, so look one row behind the target
        pawn_row = target.row - attacker.forward
        for dc in (-1, 1):
            if self._holds(board, pawn_row, target.col + dc, attacker, (PieceType.PAWN,)):
                return True

        for dr, dc in KNIGHT_OFFSETS:
            if self._holds(board, target.row + dr, target.col + dc, attacker, (PieceType.KNIGHT,)):
                return True

        if self._attacked_by_sliding(board, attacker, target, ORTHOGONALS,
                                     (PieceType.ROOK, PieceType.QUEEN)):
            return True
        if self._attacked_by_sliding(board, attacker, target, DIAGONALS,
                                     (PieceType.BISHOP, PieceType.QUEEN)):
            return True

        for dr, dc in KING_OFFSETS:
            if self._holds(board, target.row + dr, target.col + dc, attacker, (PieceType.KING,)):
                return True
        return False

    def _holds(self, board: Board, row: int, col: int, color: PlayerColor, types) -> bool:
        if not board.is_inside(row, col):
            return False
        piece = board.get_piece(row, col)
        return piece is not None and piece.color == color and piece.type in types

    def _attacked_by_sliding(self, board: Board, attacker: PlayerColor, target: Square,
                             directions: List[Tuple[int, int]], types) -> bool:
        for dr, dc in directions:
            row, col = target.row + dr, target.col + dc
            while board.is_inside(row, col):
                piece = board.get_piece(row, col)
                if piece is not None:
                    if piece.color == attacker and piece.type in types:
                        return True
                    break
                row += dr
                col += dc
        return False

    def is_in_check(self, state: 'GameState', color: PlayerColor) -> bool:
        """A side without a king counts as in check"""
        king = state.board.find_king(color)
        if king is None:
            return True
        return self.is_square_attacked(state.board, color.opposite(), king)

    def _has_legal_moves(self, state: 'GameState', color: PlayerColor) -> bool:
        original = state.to_move
        state.to_move = color
        try:
            return any(self.legal_moves(state, square)
                       for square, piece in state.board.pieces() if piece.color == color)
        finally:
            state.to_move = original

    def is_checkmate(self, state: 'GameState', color: PlayerColor) -> bool:
        if not self.is_in_check(state, color):
            return False
        return not self._has_legal_moves(state, color)

    def is_stalemate(self, state: 'GameState', color: PlayerColor) -> bool:
        if self.is_in_check(state, color):
            return False
        return not self._has_legal_moves(state, color)

    def is_draw(self, state: 'GameState') -> bool:
        return state.is_draw(self)
