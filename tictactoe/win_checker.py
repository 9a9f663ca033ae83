"""
Win checker for TicTacToe.
Checks if a player has won, if the game is a draw, and whose turn it is.
"""

from enum import Enum
from typing import Optional, Tuple
from dataclasses import dataclass

import numpy as np

from .board import Board, Mark


class StatusKind(Enum):
    """Where a game stands."""
    IN_PROGRESS = "in_progress"
    WIN = "win"
    DRAW = "draw"


@dataclass(frozen=True)
class GameStatus:
    """
    Status of a board.

    For IN_PROGRESS, mark is the player who moves next.
    For WIN, mark is the winner. For DRAW, mark is None.
    """
    kind: StatusKind
    mark: Optional[Mark] = None

    @classmethod
    def in_progress(cls, next_mark: Mark) -> "GameStatus":
        return cls(StatusKind.IN_PROGRESS, next_mark)

    @classmethod
    def win(cls, mark: Mark) -> "GameStatus":
        return cls(StatusKind.WIN, mark)

    @classmethod
    def draw(cls) -> "GameStatus":
        return cls(StatusKind.DRAW)

    @property
    def is_over(self) -> bool:
        return self.kind != StatusKind.IN_PROGRESS

    def describe(self) -> str:
        """Human-readable status line."""
        if self.kind == StatusKind.WIN:
            return f"Winner: {self.mark.name}"
        if self.kind == StatusKind.DRAW:
            return "Draw!"
        return f"Next player: {self.mark.name}"


class WinChecker:
    """
    Checks for win conditions in TicTacToe.

    Win condition: 3 marks of the same player in a row
    (horizontally, vertically, or diagonally)
    """

    # All possible winning lines, checked in this order
    WINNING_LINES = np.array([
        # Rows
        [0, 1, 2],
        [3, 4, 5],
        [6, 7, 8],
        # Columns
        [0, 3, 6],
        [1, 4, 7],
        [2, 5, 8],
        # Diagonals
        [0, 4, 8],
        [2, 4, 6],
    ])

    def _complete_lines(self, board: Board) -> np.ndarray:
        """Indices into WINNING_LINES of every line held by a single mark."""
        codes = np.fromiter((cell.value for cell in board.cells), dtype=np.int8, count=len(board))
        lines = codes[self.WINNING_LINES]
        complete = (lines[:, 0] != Mark.EMPTY.value) & (lines == lines[:, :1]).all(axis=1)
        return np.flatnonzero(complete)

    def check_winner(self, board: Board) -> Optional[Mark]:
        """
        Check if there's a winner.

        Args:
            board: The board to check.

        Returns:
            The winning mark, or None if no winner yet.
        """
        complete = self._complete_lines(board)
        if complete.size == 0:
            return None

        first_cell = int(self.WINNING_LINES[complete[0], 0])
        return board[first_cell]

    def get_winning_line(self, board: Board) -> Optional[Tuple[int, int, int]]:
        """
        Get the winning line if there is one.

        Returns:
            The first complete line as three cell indices, or None.
        """
        complete = self._complete_lines(board)
        if complete.size == 0:
            return None
        return tuple(int(i) for i in self.WINNING_LINES[complete[0]])

    def check_draw(self, board: Board) -> bool:
        """A draw is a full board with no winner."""
        return self.check_winner(board) is None and board.is_full()

    def is_terminal(self, board: Board) -> bool:
        """True if somebody has won or there is nowhere left to play."""
        return self.check_winner(board) is not None or board.is_full()

    def next_mark(self, board: Board) -> Mark:
        """
        Whose turn it is on this board.
        X moves on even plies, so X is next whenever the counts are equal.
        """
        placed = len(board) - len(board.empty_cells())
        return Mark.X if placed % 2 == 0 else Mark.O

    def get_status(self, board: Board) -> GameStatus:
        """
        Get the status of a board.

        Returns:
            Win(mark), Draw, or InProgress(next mark).
        """
        winner = self.check_winner(board)
        if winner is not None:
            return GameStatus.win(winner)
        if board.is_full():
            return GameStatus.draw()
        return GameStatus.in_progress(self.next_mark(board))


# Shared instance for the module-level helpers
_checker = WinChecker()


def winner(board: Board) -> Optional[Mark]:
    return _checker.check_winner(board)


def is_draw(board: Board) -> bool:
    return _checker.check_draw(board)


def is_terminal(board: Board) -> bool:
    return _checker.is_terminal(board)


def winning_line(board: Board) -> Optional[Tuple[int, int, int]]:
    return _checker.get_winning_line(board)


def status(board: Board) -> GameStatus:
    return _checker.get_status(board)
