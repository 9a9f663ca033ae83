"""
AI player for TicTacToe.
Three move generators, one per difficulty:

    EASY   - random empty cell
    MEDIUM - win if possible, else block, else random
    HARD   - full minimax search, never loses
"""

import logging
import random
from enum import Enum
from functools import lru_cache
from typing import Optional, Dict

from .board import Board, Mark
from .config import GameConfig
from .win_checker import winner, is_terminal

logger = logging.getLogger(__name__)


class Difficulty(Enum):
    """AI difficulty levels."""
    EASY = 1      # Random moves
    MEDIUM = 2    # Immediate wins and blocks
    HARD = 3      # Full minimax

    @classmethod
    def parse(cls, text: str) -> "Difficulty":
        """Parse "easy", "MEDIUM", ... into a Difficulty."""
        try:
            return cls[text.strip().upper()]
        except KeyError:
            choices = ", ".join(d.name.lower() for d in cls)
            raise ValueError(f"Unknown difficulty {text!r}. Choose one of: {choices}")


class NoLegalMove(AssertionError):
    """A move generator was asked to move on a finished board."""


def _check_can_move(board: Board):
    if not board.empty_cells() or is_terminal(board):
        raise NoLegalMove(f"No legal move on a finished board:\n{board}")


class MoveGenerator:
    """
    Picks a cell for the computer.

    Subclasses implement select_move(). Callers must never ask for a move
    on a finished board; doing so raises NoLegalMove.
    """

    difficulty: Difficulty

    def select_move(self, board: Board, computer_mark: Mark) -> int:
        raise NotImplementedError


class RandomMoveGenerator(MoveGenerator):
    """Any empty cell, chosen uniformly."""

    difficulty = Difficulty.EASY

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def select_move(self, board: Board, computer_mark: Mark) -> int:
        _check_can_move(board)
        return self.rng.choice(board.empty_cells())


class HeuristicMoveGenerator(MoveGenerator):
    """
    Looks one move ahead for both sides.

    Takes an immediate win, otherwise blocks the opponent's immediate win,
    otherwise plays randomly. It doesn't see forks, so it can be beaten.
    """

    difficulty = Difficulty.MEDIUM

    def __init__(self, rng: Optional[random.Random] = None):
        self.fallback = RandomMoveGenerator(rng)

    def find_winning_move(self, board: Board, mark: Mark) -> Optional[int]:
        """
        First empty cell (ascending) that completes a line for mark.

        Returns:
            The cell index, or None if mark can't win in one move.
        """
        for index in board.empty_cells():
            if winner(board.with_move(index, mark)) == mark:
                return index
        return None

    def select_move(self, board: Board, computer_mark: Mark) -> int:
        _check_can_move(board)

        move = self.find_winning_move(board, computer_mark)
        if move is not None:
            logger.debug("Heuristic: winning at %d", move)
            return move

        move = self.find_winning_move(board, computer_mark.opposite())
        if move is not None:
            logger.debug("Heuristic: blocking at %d", move)
            return move

        return self.fallback.select_move(board, computer_mark)


@lru_cache(maxsize=None)
def minimax(board: Board, maximizing: bool, computer_mark: Mark) -> int:
    """
    Score a board by searching the whole game tree.

    Args:
        board: Board to score.
        maximizing: True if the computer moves next on this board.
        computer_mark: The computer's mark; the opponent has the other one.

    Returns:
        WIN_SCORE if the computer has won, LOSS_SCORE if the opponent has,
        DRAW_SCORE for a full board, otherwise the minimax value of the
        children. There is no depth discount.
    """
    won = winner(board)
    if won == computer_mark:
        return GameConfig.WIN_SCORE
    if won == computer_mark.opposite():
        return GameConfig.LOSS_SCORE
    if board.is_full():
        return GameConfig.DRAW_SCORE

    mover = computer_mark if maximizing else computer_mark.opposite()
    scores = [
        minimax(board.with_move(index, mover), not maximizing, computer_mark)
        for index in board.empty_cells()
    ]
    return max(scores) if maximizing else min(scores)


class OptimalMoveGenerator(MoveGenerator):
    """
    An AI that plays TicTacToe using the Minimax algorithm.

    The AI will always play optimally - it will win if possible,
    block the opponent if needed, and never lose (at worst, draw).
    Among equally scored moves the lowest cell index is played.

    The search is memoized on (board, maximizing, mark). With at most 9!
    move orders on a 3x3 board this is all the speed-up needed; a larger
    board would need pruning.
    """

    difficulty = Difficulty.HARD

    def score_moves(self, board: Board, computer_mark: Mark) -> Dict[int, int]:
        """Minimax score of every empty cell, in ascending cell order."""
        return {
            index: minimax(board.with_move(index, computer_mark), False, computer_mark)
            for index in board.empty_cells()
        }

    def select_move(self, board: Board, computer_mark: Mark) -> int:
        _check_can_move(board)

        best_score = float('-inf')
        best_move = None

        for index, score in self.score_moves(board, computer_mark).items():
            # Strictly greater: the first cell with the best score wins ties
            if score > best_score:
                best_score = score
                best_move = index

        logger.debug(
            "Minimax best move: %d (score: %d), cache: %s",
            best_move, best_score, minimax.cache_info()
        )
        return best_move


def make_generator(difficulty: Difficulty, rng: Optional[random.Random] = None) -> MoveGenerator:
    """Get the move generator for a difficulty."""
    if difficulty == Difficulty.EASY:
        return RandomMoveGenerator(rng)
    if difficulty == Difficulty.MEDIUM:
        return HeuristicMoveGenerator(rng)
    return OptimalMoveGenerator()


class AIPlayer:
    """
    The computer opponent.

    Holds the computer's mark and difficulty; get_move() asks the
    generator for the current difficulty. Changing the difficulty affects
    the next move only.
    """

    def __init__(
        self,
        mark: Mark = Mark.O,
        difficulty: Difficulty = Difficulty.EASY,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize the AI player.

        Args:
            mark: Which mark the AI plays (default: O)
            difficulty: Starting difficulty.
            rng: Random source shared by EASY and MEDIUM. Seed it for
                reproducible games.
        """
        self.mark = mark
        self.difficulty = difficulty
        self.rng = rng or random.Random()
        self.generators = {level: make_generator(level, self.rng) for level in Difficulty}

    def set_difficulty(self, difficulty: Difficulty):
        self.difficulty = difficulty

    def get_move(self, board: Board) -> int:
        """
        Pick the computer's move.

        Raises:
            NoLegalMove: If the board is already finished.
        """
        move = self.generators[self.difficulty].select_move(board, self.mark)
        logger.info("AI (%s, %s) plays %d", self.mark.name, self.difficulty.name, move)
        return move
