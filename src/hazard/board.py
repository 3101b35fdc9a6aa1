"""
Hazard Chess - Board Model
Piece values and the 8x8 grid they stand on
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple


class PlayerColor(Enum):
    """Enumeration for the two sides"""
    WHITE = "white"
    BLACK = "black"

    def opposite(self) -> 'PlayerColor':
        return PlayerColor.BLACK if self == PlayerColor.WHITE else PlayerColor.WHITE

    @property
    def forward(self) -> int:
        """Row delta of a pawn step (white starts on row 6 and moves up)"""
        return -1 if self == PlayerColor.WHITE else 1

    @property
    def home_row(self) -> int:
        return 7 if self == PlayerColor.WHITE else 0


class PieceType(Enum):
    """Enumeration for chess piece types"""
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]


_SYMBOLS = {
    PieceType.PAWN: 'p',
    PieceType.KNIGHT: 'n',
    PieceType.BISHOP: 'b',
    PieceType.ROOK: 'r',
    PieceType.QUEEN: 'q',
    PieceType.KING: 'k',
}


@dataclass(frozen=True)
class Square:
    """A board coordinate; row 0 is black's back rank"""
    row: int
    col: int

    def __post_init__(self):
        if not (0 <= self.row < Board.SIZE and 0 <= self.col < Board.SIZE):
            raise ValueError(f"Square out of range: ({self.row}, {self.col})")

    def __repr__(self) -> str:
        return f"({self.row}, {self.col})"


@dataclass(frozen=True)
class Piece:
    """A colored piece. Captured and mined pieces keep this same value."""
    color: PlayerColor
    type: PieceType

    @property
    def symbol(self) -> str:
        """Single letter, uppercase for white"""
        letter = self.type.symbol
        return letter.upper() if self.color == PlayerColor.WHITE else letter


BACK_RANK = [
    PieceType.ROOK, PieceType.KNIGHT, PieceType.BISHOP, PieceType.QUEEN,
    PieceType.KING, PieceType.BISHOP, PieceType.KNIGHT, PieceType.ROOK,
]


class Board:
    """Manages piece placement on the 8x8 grid"""

    SIZE = 8

    def __init__(self):
        self.grid: List[List[Optional[Piece]]] = []
        self.clear()

    def clear(self):
        """Remove every piece"""
        self.grid = [[None] * self.SIZE for _ in range(self.SIZE)]

    def setup_standard(self):
        """Place both armies on their starting squares"""
        self.clear()
        for col, piece_type in enumerate(BACK_RANK):
            self.grid[0][col] = Piece(PlayerColor.BLACK, piece_type)
            self.grid[7][col] = Piece(PlayerColor.WHITE, piece_type)
        for col in range(self.SIZE):
            self.grid[1][col] = Piece(PlayerColor.BLACK, PieceType.PAWN)
            self.grid[6][col] = Piece(PlayerColor.WHITE, PieceType.PAWN)

    @classmethod
    def is_inside(cls, row: int, col: int) -> bool:
        return 0 <= row < cls.SIZE and 0 <= col < cls.SIZE

    def _check(self, row: int, col: int):
        if not self.is_inside(row, col):
            raise IndexError(f"Board coordinates out of range: ({row}, {col})")

    def get_piece(self, row: int, col: int) -> Optional[Piece]:
        self._check(row, col)
        return self.grid[row][col]

    def set_piece(self, row: int, col: int, piece: Optional[Piece]):
        self._check(row, col)
        self.grid[row][col] = piece

    def remove_piece(self, row: int, col: int) -> Optional[Piece]:
        """Clear a square and return whatever stood there"""
        self._check(row, col)
        piece = self.grid[row][col]
        self.grid[row][col] = None
        return piece

    def is_empty(self, row: int, col: int) -> bool:
        return self.get_piece(row, col) is None

    def pieces(self) -> Iterator[Tuple[Square, Piece]]:
        """Yield every occupied square in row-major order"""
        for row in range(self.SIZE):
            for col in range(self.SIZE):
                piece = self.grid[row][col]
                if piece is not None:
                    yield Square(row, col), piece

    def find_king(self, color: PlayerColor) -> Optional[Square]:
        for square, piece in self.pieces():
            if piece.color == color and piece.type == PieceType.KING:
                return square
        return None

    def copy(self) -> 'Board':
        """Independent copy for move simulation"""
        clone = Board()
        clone.grid = [list(row) for row in self.grid]
        return clone

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return False
        return self.grid == other.grid
