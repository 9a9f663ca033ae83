"""
Move validator for TicTacToe.
Validates human moves and history jumps before the session applies them.
"""

from typing import Optional, List, Sequence
from dataclasses import dataclass

from .board import Board, Mark, InvalidMove, BOARD_CELLS
from .win_checker import WinChecker

# Error kinds carried by ValidationResult.error
INVALID_MOVE = "invalid_move"
OUT_OF_RANGE = "out_of_range"


@dataclass
class ValidationResult:
    """Result of move validation."""
    is_valid: bool
    error_message: Optional[str] = None
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.is_valid

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def invalid_move(cls, message: str) -> "ValidationResult":
        return cls(is_valid=False, error_message=message, error=INVALID_MOVE)

    @classmethod
    def out_of_range(cls, message: str) -> "ValidationResult":
        return cls(is_valid=False, error_message=message, error=OUT_OF_RANGE)


class MoveValidator:
    """
    Validates TicTacToe moves.

    Rules:
    1. Can only place on empty cells 0-8
    2. Game must not be over
    3. It must be the mover's turn
    """

    def __init__(self, win_checker: Optional[WinChecker] = None):
        self.win_checker = win_checker or WinChecker()

    def validate_move(
        self,
        board: Board,
        index: int,
        mark: Mark,
        is_players_turn: bool = True
    ) -> ValidationResult:
        """
        Validate a move.

        Args:
            board: Board the move would be played on.
            index: Cell to place the mark on (0-8).
            mark: The mover's mark.
            is_players_turn: False while the other side is to move
                (e.g. the computer is thinking).

        Returns:
            ValidationResult with is_valid and error_message.
        """
        if not is_players_turn:
            return ValidationResult.invalid_move("It's not your turn!")

        # Check if game is over
        if self.win_checker.is_terminal(board):
            return ValidationResult.invalid_move("Game is already over!")

        # Range and occupancy checks live on the board itself
        try:
            board.with_move(index, mark)
        except InvalidMove as e:
            return ValidationResult.invalid_move(str(e))

        # All checks passed!
        return ValidationResult.ok()

    def validate_jump(self, history: Sequence[Board], step: int) -> ValidationResult:
        """
        Validate a jump to a point in the move history.

        Args:
            history: All board snapshots of the game.
            step: Ply to jump to.

        Returns:
            ValidationResult; error is OUT_OF_RANGE when the ply doesn't exist.
        """
        last = len(history) - 1
        if not isinstance(step, int) or isinstance(step, bool) or not 0 <= step <= last:
            return ValidationResult.out_of_range(
                f"Invalid step {step!r}. Must be 0-{last}."
            )
        return ValidationResult.ok()

    def get_valid_moves(self, board: Board) -> List[int]:
        """
        Get all valid moves on a board.

        Returns:
            Empty cell indices, or an empty list if the game is over.
        """
        if self.win_checker.is_terminal(board):
            return []
        return board.empty_cells()

    def is_reachable(self, board: Board) -> bool:
        """
        Check that a board could come from legal play.

        X moves first, so X has placed as many marks as O or one more,
        and play stops at the first win.
        """
        x_count = board.count(Mark.X)
        o_count = board.count(Mark.O)
        if x_count - o_count not in (0, 1):
            return False

        winner = self.win_checker.check_winner(board)
        if winner == Mark.X:
            return x_count == o_count + 1
        if winner == Mark.O:
            return x_count == o_count
        return x_count + o_count <= BOARD_CELLS
