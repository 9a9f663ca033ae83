"""
Game session management for TicTacToe.
Owns the move history, the current step, whose turn it is, and the
computer's pending move.
"""

import logging
import random
import threading
from enum import Enum
from typing import Optional, List, Tuple, Callable, Union
from dataclasses import dataclass

from .board import Board, Mark
from .config import GameConfig
from .win_checker import WinChecker, GameStatus
from .move_validator import MoveValidator, ValidationResult
from .ai_player import AIPlayer, Difficulty
from .scheduler import ThreadingScheduler

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Where the session's state machine is."""
    HUMAN_TO_MOVE = "human_to_move"
    COMPUTER_THINKING = "computer_thinking"
    TERMINAL = "terminal"


@dataclass
class PendingMove:
    """A computer move waiting out the thinking delay."""
    index: int
    mark: Mark
    difficulty: Difficulty
    status: str = "pending"  # pending, done, cancelled


class GameSession:
    """
    One game against the computer.

    Tracks:
    - The history of board snapshots, starting with the empty board
    - The current step (which snapshot is on screen)
    - The state: human to move, computer thinking, or game over
    - The computer's pending move, if any

    Jumping to an earlier step only moves the cursor. Playing a move from
    an earlier step throws away the later snapshots and continues from
    there.

    All transitions hold a lock, so a session can be driven from timer
    threads. Sessions share nothing with each other.
    """

    def __init__(
        self,
        difficulty: Union[Difficulty, str, None] = None,
        human_mark: Union[Mark, str, None] = None,
        scheduler=None,
        rng: Optional[random.Random] = None,
        thinking_delay: Optional[float] = None
    ):
        """
        Initialize and start a new game.

        Args:
            difficulty: Computer difficulty (default: GameConfig.DEFAULT_DIFFICULTY).
            human_mark: X or O for the human (default: GameConfig.HUMAN_MARK).
                X always moves first, so if the human plays O the computer
                opens the game.
            scheduler: Anything with call_later(delay_s, callback) returning
                a cancellable handle (default: ThreadingScheduler).
            rng: Random source for EASY and MEDIUM.
            thinking_delay: Seconds before the computer's move is placed.
        """
        if difficulty is None:
            difficulty = GameConfig.DEFAULT_DIFFICULTY
        if isinstance(difficulty, str):
            difficulty = Difficulty.parse(difficulty)

        if human_mark is None:
            human_mark = GameConfig.HUMAN_MARK
        if isinstance(human_mark, str):
            human_mark = Mark.parse(human_mark)

        if rng is None:
            rng = random.Random(GameConfig.RANDOM_SEED)

        self.human_mark = human_mark
        self.computer_mark = human_mark.opposite()
        self.thinking_delay = (
            GameConfig.THINKING_DELAY_S if thinking_delay is None else thinking_delay
        )
        self.scheduler = scheduler or ThreadingScheduler()

        self.win_checker = WinChecker()
        self.validator = MoveValidator(self.win_checker)
        self.ai = AIPlayer(self.computer_mark, difficulty, rng)

        self._lock = threading.RLock()
        self._listeners: List[Callable[["GameSession"], None]] = []
        self._history: List[Board] = [Board.empty()]
        self._step = 0
        self._state = SessionState.HUMAN_TO_MOVE
        self._handle = None
        # Bumped whenever a pending move is cancelled; stale callbacks check it
        self._generation = 0
        self.pending_move: Optional[PendingMove] = None

        self.new_game()

    # ==================== READ-ONLY VIEW ====================

    @property
    def history(self) -> Tuple[Board, ...]:
        return tuple(self._history)

    @property
    def history_length(self) -> int:
        return len(self._history)

    @property
    def step(self) -> int:
        return self._step

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def current_board(self) -> Board:
        return self._history[self._step]

    @property
    def status(self) -> GameStatus:
        return self.win_checker.get_status(self.current_board)

    @property
    def difficulty(self) -> Difficulty:
        return self.ai.difficulty

    @property
    def is_human_turn(self) -> bool:
        return self._state == SessionState.HUMAN_TO_MOVE

    def next_mark(self) -> Mark:
        """Whose turn it is at the current step. X moves on even steps."""
        return Mark.X if self._step % 2 == 0 else Mark.O

    def move_list(self) -> List[str]:
        """One description per history entry, for a jump-to list."""
        return [
            f"Go to move #{step}" if step else "Go to game start"
            for step in range(len(self._history))
        ]

    # ==================== LISTENERS ====================

    def add_listener(self, callback: Callable[["GameSession"], None]):
        """Call callback(session) after every change."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[["GameSession"], None]):
        self._listeners.remove(callback)

    def _notify(self):
        for callback in list(self._listeners):
            callback(self)

    # ==================== ACTIONS ====================

    def new_game(self):
        """Throw away the current game and start from the empty board."""
        with self._lock:
            self._cancel_pending()
            self._history = [Board.empty()]
            self._step = 0
            logger.info(
                "New game: human %s, computer %s, difficulty %s",
                self.human_mark.name, self.computer_mark.name, self.difficulty.name
            )
            self._update_state()
        self._notify()

    def close(self):
        """Drop any pending computer move, e.g. before the window closes."""
        with self._lock:
            self._cancel_pending()

    def play_human(self, index: int) -> ValidationResult:
        """
        Play the human's move at a cell.

        Args:
            index: Cell index (0-8).

        Returns:
            ValidationResult. On failure nothing changes.
        """
        with self._lock:
            if self._state == SessionState.TERMINAL:
                result = ValidationResult.invalid_move("Game is already over!")
            else:
                result = self.validator.validate_move(
                    self.current_board,
                    index,
                    self.human_mark,
                    is_players_turn=self._state == SessionState.HUMAN_TO_MOVE
                )

            if not result:
                logger.info("Rejected human move %r: %s", index, result.error_message)
                return result

            self._append(self.current_board.with_move(index, self.human_mark))
            logger.info("Human (%s) plays %d", self.human_mark.name, index)
            self._update_state()
        self._notify()
        return result

    def jump_to(self, step: int) -> ValidationResult:
        """
        Move the cursor to a step in the history.

        History is left alone. Any pending computer move is dropped; if
        the computer is to move at the new step, it starts thinking again.

        Returns:
            ValidationResult; error is "out_of_range" for a bad step.
        """
        with self._lock:
            result = self.validator.validate_jump(self._history, step)
            if not result:
                logger.info("Rejected jump: %s", result.error_message)
                return result

            self._cancel_pending()
            self._step = step
            logger.info("Jumped to step %d of %d", step, len(self._history) - 1)
            self._update_state()
        self._notify()
        return result

    def set_difficulty(self, difficulty: Union[Difficulty, str]):
        """
        Change the computer's difficulty from its next move on.
        A move already waiting out the delay is recomputed.
        """
        if isinstance(difficulty, str):
            difficulty = Difficulty.parse(difficulty)

        with self._lock:
            self.ai.set_difficulty(difficulty)
            logger.info("Difficulty set to: %s", difficulty.name)
            if self._state == SessionState.COMPUTER_THINKING:
                self._schedule_computer_move()
        self._notify()

    # ==================== INTERNALS ====================

    def _append(self, board: Board):
        """Add a snapshot after the current step, dropping any later ones."""
        dropped = len(self._history) - 1 - self._step
        if dropped:
            logger.info("Discarding %d later move(s) from history", dropped)
            del self._history[self._step + 1:]
        self._history.append(board)
        self._step += 1

    def _update_state(self):
        """Work out the state from the current board and step."""
        board = self.current_board
        if self.win_checker.is_terminal(board):
            self._state = SessionState.TERMINAL
            logger.info("Game over: %s", self.status.describe())
        elif self.next_mark() == self.computer_mark:
            self._state = SessionState.COMPUTER_THINKING
            self._schedule_computer_move()
        else:
            self._state = SessionState.HUMAN_TO_MOVE

    def _cancel_pending(self):
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self.pending_move is not None:
            self.pending_move.status = "cancelled"
            logger.debug("Cancelled pending move %d", self.pending_move.index)
            self.pending_move = None

    def _schedule_computer_move(self):
        """Pick the computer's move now and place it after the delay."""
        self._cancel_pending()

        index = self.ai.get_move(self.current_board)
        self.pending_move = PendingMove(
            index=index,
            mark=self.computer_mark,
            difficulty=self.difficulty
        )

        generation = self._generation
        self._handle = self.scheduler.call_later(
            self.thinking_delay,
            lambda: self._commit_computer_move(generation)
        )

    def _commit_computer_move(self, generation: int):
        with self._lock:
            if generation != self._generation or self._state != SessionState.COMPUTER_THINKING:
                logger.debug("Ignoring stale computer move")
                return

            pending = self.pending_move
            self._handle = None
            self.pending_move = None
            pending.status = "done"

            self._append(self.current_board.with_move(pending.index, self.computer_mark))
            self._update_state()
        self._notify()


# ==================== FUNCTIONAL INTERFACE ====================

def new_game(**kwargs) -> GameSession:
    """Start a session. Keyword arguments go to GameSession."""
    return GameSession(**kwargs)


def current_board(session: GameSession) -> Board:
    return session.current_board


def current_status(session: GameSession) -> GameStatus:
    return session.status


def play_human(session: GameSession, index: int) -> ValidationResult:
    return session.play_human(index)


def set_difficulty(session: GameSession, level: Union[Difficulty, str]):
    session.set_difficulty(level)


def jump_to(session: GameSession, step: int) -> ValidationResult:
    return session.jump_to(step)


def history_length(session: GameSession) -> int:
    return session.history_length
