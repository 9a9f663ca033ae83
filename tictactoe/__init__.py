"""
TicTacToe Engine
================
Tic-tac-toe against a computer opponent with three difficulty tiers
(random, heuristic, minimax) and a move history you can jump through.

X always moves first. By default the human plays X.
"""

__version__ = "1.0.0"

from .board import Board, Mark, InvalidMove
from .win_checker import WinChecker, GameStatus, StatusKind
from .move_validator import MoveValidator, ValidationResult
from .ai_player import AIPlayer, Difficulty, NoLegalMove
from .scheduler import ManualScheduler, ThreadingScheduler
from .session import GameSession, SessionState
