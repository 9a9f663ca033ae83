"""
Console TicTacToe against the computer.

This script ties together:
- The game session (history, turns, the computer's thinking delay)
- The AI difficulty tiers
- A text board and a small command prompt

Run this script to play in the terminal, or with --ui for the window.

Commands during play:
    1-9          place your mark (cells numbered row by row)
    j <step>     jump to a step in the history
    h            show the history
    d <level>    set difficulty (easy, medium, hard)
    n            new game
    q            quit
"""

import logging
import random
import sys
import time
from typing import Dict, Optional

from tictactoe.board import Board, Mark
from tictactoe.config import GameConfig
from tictactoe.win_checker import StatusKind, is_terminal, status as board_status
from tictactoe.ai_player import Difficulty, make_generator
from tictactoe.scheduler import ManualScheduler
from tictactoe.session import GameSession, SessionState


def configure_logging(debug: bool = False):
    """Set up logging for the entry points."""
    level = logging.DEBUG if debug or GameConfig.DEBUG_MODE else logging.WARNING
    logging.basicConfig(level=level, format=GameConfig.LOG_FORMAT)


def format_board(board: Board) -> str:
    """Board with cell numbers 1-9 shown in empty cells."""
    cells = [
        cell.symbol if cell != Mark.EMPTY else str(i + 1)
        for i, cell in enumerate(board)
    ]
    rows = [" " + " | ".join(cells[start:start + 3]) for start in range(0, 9, 3)]
    return "\n-----------\n".join(rows)


class ConsoleGame:
    """
    Text front end for a GameSession.

    The computer's delay runs on a ManualScheduler: after each human move
    the console sleeps for the delay and then advances the clock, which
    places the computer's move.
    """

    def __init__(
        self,
        difficulty: Difficulty = Difficulty.EASY,
        human_mark: Mark = Mark.X,
        thinking_delay: float = GameConfig.THINKING_DELAY_S,
        seed: Optional[int] = None,
        input_func=input,
        output_func=print
    ):
        self.scheduler = ManualScheduler()
        self.session = GameSession(
            difficulty=difficulty,
            human_mark=human_mark,
            scheduler=self.scheduler,
            rng=random.Random(seed),
            thinking_delay=thinking_delay
        )
        self.input = input_func
        self.output = output_func
        self.is_running = False

    def _wait_for_computer(self):
        while self.session.state == SessionState.COMPUTER_THINKING:
            self.output("\n>>> Computer is thinking...")
            time.sleep(self.session.thinking_delay)
            self.scheduler.advance(self.session.thinking_delay)

    def show(self):
        session = self.session
        self.output("")
        self.output(format_board(session.current_board))
        self.output(f"\nStep {session.step}/{session.history_length - 1} - "
                    f"{session.status.describe()} - Difficulty: {session.difficulty.name.lower()}")

    def show_history(self):
        for step, description in enumerate(self.session.move_list()):
            marker = "->" if step == self.session.step else "  "
            self.output(f" {marker} {step}: {description}")

    def handle_command(self, command: str) -> bool:
        """
        Run one command.

        Returns:
            False when the player wants to quit.
        """
        parts = command.strip().split()
        if not parts:
            return True

        action = parts[0].lower()

        if action == "q":
            return False

        if action == "n":
            self.session.new_game()
            self.output("New game!")
        elif action == "h":
            self.show_history()
        elif action == "j" and len(parts) == 2 and parts[1].isdecimal():
            result = self.session.jump_to(int(parts[1]))
            if not result:
                self.output(result.error_message)
        elif action == "d" and len(parts) == 2:
            try:
                self.session.set_difficulty(parts[1])
            except ValueError as e:
                self.output(str(e))
            else:
                self.output(f"Difficulty set to: {parts[1].lower()}")
        elif action.isdecimal():
            result = self.session.play_human(int(action) - 1)
            if not result:
                self.output(f"Illegal move: {result.error_message}")
        else:
            self.output("Unknown command. Type 1-9, j <step>, h, d <level>, n or q.")

        return True

    def run(self):
        self.output(f"You play {self.session.human_mark.name}, "
                    f"the computer plays {self.session.computer_mark.name}.")
        self.is_running = True

        while self.is_running:
            self._wait_for_computer()
            self.show()

            if self.session.is_human_turn:
                prompt = f"Play {self.session.human_mark.name} at [1-9]: "
            else:
                prompt = "Game over. [j <step> / h / n / q]: "

            try:
                command = self.input(prompt)
            except EOFError:
                break
            self.is_running = self.handle_command(command)


def play_selfplay(
    rounds: int,
    x_difficulty: Difficulty = Difficulty.HARD,
    o_difficulty: Difficulty = Difficulty.HARD,
    seed: Optional[int] = None
) -> Dict[str, int]:
    """
    Play computer against computer without delays.

    Returns:
        Counts of "X" wins, "O" wins and "draw".
    """
    rng = random.Random(seed)
    generators = {
        Mark.X: make_generator(x_difficulty, rng),
        Mark.O: make_generator(o_difficulty, rng),
    }
    results = {"X": 0, "O": 0, "draw": 0}

    for _ in range(rounds):
        board = Board.empty()
        mark = Mark.X
        while not is_terminal(board):
            board = board.with_move(generators[mark].select_move(board, mark), mark)
            mark = mark.opposite()

        status = board_status(board)
        if status.kind == StatusKind.WIN:
            results[status.mark.name] += 1
        else:
            results["draw"] += 1

    return results


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="TicTacToe against the computer")
    parser.add_argument(
        "--difficulty",
        choices=[d.name.lower() for d in Difficulty],
        default=GameConfig.DEFAULT_DIFFICULTY.lower(),
        help="Computer difficulty"
    )
    parser.add_argument(
        "--computer-first",
        action="store_true",
        help="Let the computer play first (as X)"
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=GameConfig.THINKING_DELAY_S,
        help="Seconds the computer thinks before moving"
    )
    parser.add_argument("--seed", type=int, default=GameConfig.RANDOM_SEED, help="Random seed")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    parser.add_argument(
        "--selfplay",
        type=int,
        metavar="N",
        help="Play N headless games of the chosen difficulty against itself and report"
    )
    parser.add_argument("--ui", action="store_true", help="Open the window instead")

    args = parser.parse_args()
    configure_logging(args.debug)

    difficulty = Difficulty.parse(args.difficulty)
    human_mark = Mark.O if args.computer_first else Mark.X

    if args.selfplay:
        results = play_selfplay(args.selfplay, difficulty, difficulty, args.seed)
        print(f"Self-play ({difficulty.name} vs {difficulty.name}), {args.selfplay} games: "
              f"X {results['X']}, O {results['O']}, draw {results['draw']}")
        return 0

    if args.ui:
        from ui import TicTacToeUI
        ui = TicTacToeUI(
            difficulty=difficulty,
            human_mark=human_mark,
            seed=args.seed,
            thinking_delay=args.delay
        )
        ui.run()
        return 0

    game = ConsoleGame(
        difficulty=difficulty,
        human_mark=human_mark,
        thinking_delay=args.delay,
        seed=args.seed
    )

    try:
        game.run()
    except KeyboardInterrupt:
        print("\n\nGame interrupted by user.")
    finally:
        print("Goodbye!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
