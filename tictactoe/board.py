"""
Board model for TicTacToe.
A board is an immutable snapshot of the 9 cells, indexed 0-8 row by row.
"""

from enum import Enum
from typing import Optional, List, Tuple
from dataclasses import dataclass, field


class Mark(Enum):
    """What a cell can hold."""
    EMPTY = 0
    X = 1
    O = 2

    def opposite(self) -> "Mark":
        """Get the other player's mark."""
        if self == Mark.X:
            return Mark.O
        if self == Mark.O:
            return Mark.X
        raise ValueError("EMPTY has no opposite mark")

    @property
    def symbol(self) -> str:
        """Single character used when printing a board."""
        return " " if self == Mark.EMPTY else self.name

    @classmethod
    def parse(cls, text: str) -> "Mark":
        """Parse "X", "O" (case-insensitive) into a mark."""
        try:
            mark = cls[text.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown mark {text!r}. Must be X or O.")
        if mark == cls.EMPTY:
            raise ValueError("A player mark must be X or O")
        return mark


BOARD_CELLS = 9

# Characters accepted as empty cells by Board.from_string
_EMPTY_CHARS = {"_", ".", " ", "-"}


class InvalidMove(ValueError):
    """Raised when a mark cannot be placed on a cell."""

    def __init__(self, index, message: str):
        super().__init__(message)
        self.index = index


@dataclass(frozen=True)
class Board:
    """
    One snapshot of the 3x3 grid.

    Cells are stored row-major:

        0 | 1 | 2
        3 | 4 | 5
        6 | 7 | 8

    Boards are never modified. Placing a mark with with_move() gives you
    a new board and leaves this one alone, so boards can be kept in the
    move history and used as dictionary keys.
    """

    cells: Tuple[Mark, ...] = field(default=(Mark.EMPTY,) * BOARD_CELLS)

    def __post_init__(self):
        cells = tuple(self.cells)
        if len(cells) != BOARD_CELLS:
            raise ValueError(f"Board must have exactly {BOARD_CELLS} cells, got {len(cells)}")
        for cell in cells:
            if not isinstance(cell, Mark):
                raise ValueError(f"Board cells must be Mark values, got {cell!r}")
        object.__setattr__(self, "cells", cells)

    @classmethod
    def empty(cls) -> "Board":
        """The board every game starts from."""
        return cls()

    @classmethod
    def from_string(cls, text: str) -> "Board":
        """
        Build a board from 9 characters, e.g. "XX_OO____".

        Args:
            text: X and O for marks, one of "_", ".", "-" or a space for
                empty cells. Newlines and "|" separators are ignored.

        Returns:
            The board.
        """
        cells = []
        for char in text:
            if char in "\n|":
                continue
            if char in _EMPTY_CHARS:
                cells.append(Mark.EMPTY)
            elif char.upper() in ("X", "O"):
                cells.append(Mark[char.upper()])
            else:
                raise ValueError(f"Unexpected character {char!r} in board string")
        return cls(tuple(cells))

    def __getitem__(self, index: int) -> Mark:
        return self.cells[index]

    def __iter__(self):
        return iter(self.cells)

    def __len__(self) -> int:
        return BOARD_CELLS

    def is_full(self) -> bool:
        """True if no cell is empty."""
        return Mark.EMPTY not in self.cells

    def empty_cells(self) -> List[int]:
        """
        Get all empty cells on the board.

        Returns:
            Cell indices in ascending order. Move generators rely on this
            order to break ties.
        """
        return [i for i, cell in enumerate(self.cells) if cell == Mark.EMPTY]

    def count(self, mark: Mark) -> int:
        """How many cells hold the given mark."""
        return self.cells.count(mark)

    def with_move(self, index: int, mark: Mark) -> "Board":
        """
        Place a mark, returning the new board.

        Args:
            index: Cell index (0-8).
            mark: X or O.

        Returns:
            A new Board with the cell filled in.

        Raises:
            InvalidMove: If the index is out of range, the cell is taken,
                or the mark is EMPTY.
        """
        # bool is an int subclass; True/False are not cell numbers
        if not isinstance(index, int) or isinstance(index, bool):
            raise InvalidMove(index, f"Invalid position {index!r}. Must be an integer 0-8.")

        if not 0 <= index < BOARD_CELLS:
            raise InvalidMove(index, f"Invalid position {index}. Must be 0-8.")

        if mark == Mark.EMPTY:
            raise InvalidMove(index, "Cannot place an EMPTY mark")

        current = self.cells[index]
        if current != Mark.EMPTY:
            raise InvalidMove(index, f"Cell {index} is already occupied by {current.name}")

        cells = list(self.cells)
        cells[index] = mark
        return Board(tuple(cells))

    def diff(self, other: "Board") -> Optional[int]:
        """
        Find the single cell where other has a mark and this board doesn't.

        Returns:
            The cell index, or None if the boards are not one move apart.
        """
        changed = [i for i in range(BOARD_CELLS) if self.cells[i] != other.cells[i]]
        if len(changed) != 1:
            return None
        index = changed[0]
        if self.cells[index] != Mark.EMPTY:
            return None
        return index

    def rows(self) -> List[Tuple[Mark, Mark, Mark]]:
        """The board as three rows of marks."""
        return [self.cells[start:start + 3] for start in range(0, BOARD_CELLS, 3)]

    def __str__(self) -> str:
        lines = [" | ".join(cell.symbol for cell in row) for row in self.rows()]
        return "\n---------\n".join(lines)
