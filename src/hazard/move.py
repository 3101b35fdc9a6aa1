"""
Hazard Chess - Moves and Castling Rights
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .board import PieceType, PlayerColor, Square


class MoveKind(Enum):
    """Enumeration for the ways a move is applied to the board"""
    NORMAL = "normal"
    CASTLE_KING_SIDE = "castle_king_side"
    CASTLE_QUEEN_SIDE = "castle_queen_side"
    EN_PASSANT = "en_passant"
    PROMOTION = "promotion"


PROMOTION_OPTIONS = (PieceType.QUEEN, PieceType.ROOK, PieceType.BISHOP, PieceType.KNIGHT)


@dataclass(frozen=True)
class Move:
    """
    A single ply. For castling, start/end are the king's squares.
    """
    start: Square
    end: Square
    castle_king_side: bool = False
    castle_queen_side: bool = False
    en_passant: bool = False
    promotion: Optional[PieceType] = None

    @property
    def kind(self) -> MoveKind:
        if self.castle_king_side:
            return MoveKind.CASTLE_KING_SIDE
        if self.castle_queen_side:
            return MoveKind.CASTLE_QUEEN_SIDE
        if self.en_passant:
            return MoveKind.EN_PASSANT
        if self.promotion is not None:
            return MoveKind.PROMOTION
        return MoveKind.NORMAL

    @property
    def is_castle(self) -> bool:
        return self.castle_king_side or self.castle_queen_side

    @property
    def is_promotion(self) -> bool:
        return self.promotion is not None

    def __repr__(self) -> str:
        suffix = f" ={self.promotion.symbol.upper()}" if self.promotion else ""
        return f"Move({self.start} -> {self.end}, {self.kind.value}{suffix})"


class CastlingRights:
    """Four independent castling permissions; once revoked they stay revoked"""

    def __init__(self, white_king_side: bool = True, white_queen_side: bool = True,
                 black_king_side: bool = True, black_queen_side: bool = True):
        self.white_king_side = white_king_side
        self.white_queen_side = white_queen_side
        self.black_king_side = black_king_side
        self.black_queen_side = black_queen_side

    def can_castle(self, color: PlayerColor, king_side: bool) -> bool:
        if color == PlayerColor.WHITE:
            return self.white_king_side if king_side else self.white_queen_side
        return self.black_king_side if king_side else self.black_queen_side

    def revoke(self, color: PlayerColor, king_side: bool):
        if color == PlayerColor.WHITE:
            if king_side:
                self.white_king_side = False
            else:
                self.white_queen_side = False
        elif king_side:
            self.black_king_side = False
        else:
            self.black_queen_side = False

    def revoke_all(self, color: PlayerColor):
        self.revoke(color, True)
        self.revoke(color, False)

    def revoke_for_rook_square(self, color: PlayerColor, square: Square):
        """Drop the right tied to a rook home square, if ``square`` is one"""
        if square.row != color.home_row:
            return
        if square.col == 0:
            self.revoke(color, False)
        elif square.col == 7:
            self.revoke(color, True)

    def copy(self) -> 'CastlingRights':
        return CastlingRights(self.white_king_side, self.white_queen_side,
                              self.black_king_side, self.black_queen_side)

    def key(self) -> str:
        """FEN-style rights string with '-' placeholders, e.g. 'K-kq'"""
        return ''.join([
            'K' if self.white_king_side else '-',
            'Q' if self.white_queen_side else '-',
            'k' if self.black_king_side else '-',
            'q' if self.black_queen_side else '-',
        ])

    def __eq__(self, other) -> bool:
        if not isinstance(other, CastlingRights):
            return False
        return self.key() == other.key()

    def __repr__(self) -> str:
        return f"CastlingRights({self.key()})"
