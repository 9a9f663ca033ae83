"""
Tkinter UI for TicTacToe.

Shows the board, the game status, difficulty buttons and the move
history. Click a history entry to jump back to that point; playing a move
from there continues the game from that board.
"""

import logging
import random
import tkinter as tk
from tkinter import ttk
from typing import Optional

from tictactoe.board import Mark
from tictactoe.config import GameConfig
from tictactoe.win_checker import winning_line
from tictactoe.ai_player import Difficulty
from tictactoe.session import GameSession, SessionState

logger = logging.getLogger(__name__)


class TkScheduler:
    """Schedules the computer's move on the Tk event loop."""

    class _Handle:
        def __init__(self, root: tk.Tk, after_id: str):
            self.root = root
            self.after_id = after_id

        def cancel(self):
            self.root.after_cancel(self.after_id)

    def __init__(self, root: tk.Tk):
        self.root = root

    def call_later(self, delay_s: float, callback):
        return self._Handle(self.root, self.root.after(int(delay_s * 1000), callback))


class TicTacToeUI:
    """
    Main UI class for TicTacToe.
    """

    def __init__(
        self,
        difficulty: Difficulty = Difficulty[GameConfig.DEFAULT_DIFFICULTY],
        human_mark: Mark = Mark[GameConfig.HUMAN_MARK],
        seed: Optional[int] = None,
        thinking_delay: float = GameConfig.THINKING_DELAY_S
    ):
        """Initialize the UI."""
        # Create UI
        self._create_ui()

        self.session = GameSession(
            difficulty=difficulty,
            human_mark=human_mark,
            scheduler=TkScheduler(self.root),
            rng=random.Random(seed),
            thinking_delay=thinking_delay
        )
        self.session.add_listener(lambda session: self._refresh())
        self._refresh()

    def _create_ui(self):
        """Create the Tkinter UI."""
        self.root = tk.Tk()
        self.root.title(GameConfig.WINDOW_TITLE)
        self.root.configure(bg=GameConfig.BACKGROUND)
        self.root.geometry(GameConfig.WINDOW_SIZE)

        main_frame = ttk.Frame(self.root)
        main_frame.pack(fill=tk.BOTH, expand=True, padx=10, pady=10)

        # Configure style
        style = ttk.Style()
        style.theme_use('clam')
        style.configure('TFrame', background=GameConfig.BACKGROUND)
        style.configure('TLabel', background=GameConfig.BACKGROUND, foreground='white',
                        font=(GameConfig.FONT, 11))
        style.configure('Title.TLabel', font=(GameConfig.FONT, 16, 'bold'), foreground='#00d4ff')
        style.configure('Status.TLabel', font=(GameConfig.FONT, 12), foreground='#ffd700')

        # Left panel - board
        left_frame = ttk.Frame(main_frame)
        left_frame.pack(side=tk.LEFT, fill=tk.BOTH, expand=True, padx=(0, 10))

        ttk.Label(left_frame, text="🎮 Game Board", style='Title.TLabel').pack(pady=(0, 10))

        board_frame = ttk.Frame(left_frame)
        board_frame.pack(pady=10)

        self.board_cells = []
        for index in range(9):
            cell = tk.Button(
                board_frame,
                text="",
                font=(GameConfig.FONT, 24, 'bold'),
                width=3,
                height=1,
                bg=GameConfig.CELL_BACKGROUND,
                fg='white',
                relief='ridge',
                borderwidth=2,
                command=lambda i=index: self._on_cell_click(i)
            )
            cell.grid(row=index // 3, column=index % 3, padx=2, pady=2)
            self.board_cells.append(cell)

        self.status_label = ttk.Label(left_frame, text="", style='Status.TLabel')
        self.status_label.pack(pady=5)

        self.computer_label = ttk.Label(left_frame, text="")
        self.computer_label.pack()

        # Right panel - difficulty, history, controls
        right_frame = ttk.Frame(main_frame, width=260)
        right_frame.pack(side=tk.RIGHT, fill=tk.Y, padx=(10, 0))
        right_frame.pack_propagate(False)

        ttk.Label(right_frame, text="⚙️ Difficulty", style='Title.TLabel').pack()

        diff_frame = ttk.Frame(right_frame)
        diff_frame.pack(pady=10)

        self.difficulty_buttons = {}
        for difficulty in Difficulty:
            btn = tk.Button(
                diff_frame,
                text=difficulty.name.capitalize(),
                font=(GameConfig.FONT, 10, 'bold'),
                width=7,
                command=lambda d=difficulty: self._set_difficulty(d)
            )
            btn.pack(side=tk.LEFT, padx=3)
            self.difficulty_buttons[difficulty] = btn

        ttk.Separator(right_frame, orient='horizontal').pack(fill=tk.X, pady=10)
        ttk.Label(right_frame, text="📜 Moves", style='Title.TLabel').pack()

        self.history_list = tk.Listbox(
            right_frame,
            height=10,
            bg=GameConfig.CELL_BACKGROUND,
            fg='white',
            selectbackground='#6366f1',
            activestyle='none',
            exportselection=False
        )
        self.history_list.pack(fill=tk.BOTH, expand=True, pady=5)
        self.history_list.bind('<<ListboxSelect>>', self._on_history_select)

        tk.Button(
            right_frame,
            text="🔄 New Game",
            font=(GameConfig.FONT, 11, 'bold'),
            bg='#6366f1',
            fg='white',
            command=self._reset_game
        ).pack(fill=tk.X, pady=5)

        tk.Button(
            right_frame,
            text="✕ Quit",
            font=(GameConfig.FONT, 10),
            bg='#ef4444',
            fg='white',
            command=self._quit
        ).pack(fill=tk.X)

        self.root.protocol("WM_DELETE_WINDOW", self._quit)

    def _on_cell_click(self, index: int):
        result = self.session.play_human(index)
        if not result:
            logger.info("Click on %d ignored: %s", index, result.error_message)

    def _on_history_select(self, event):
        selection = self.history_list.curselection()
        if not selection or selection[0] == self.session.step:
            return
        self.session.jump_to(selection[0])

    def _set_difficulty(self, difficulty: Difficulty):
        """Set the AI difficulty level."""
        self.session.set_difficulty(difficulty)
        print(f"Difficulty set to: {difficulty.name}")

    def _refresh(self):
        """Redraw everything from the session."""
        session = self.session
        board = session.current_board
        line = winning_line(board) or ()

        for index, cell in enumerate(board):
            color = GameConfig.X_COLOR if cell == Mark.X else GameConfig.O_COLOR
            bg = GameConfig.WIN_BACKGROUND if index in line else GameConfig.CELL_BACKGROUND
            self.board_cells[index].configure(text=cell.symbol.strip(), fg=color, bg=bg)

        status = session.status.describe()
        if session.state == SessionState.COMPUTER_THINKING:
            self.computer_label.configure(text="🤖 Computer is thinking...")
        else:
            self.computer_label.configure(text="")
        self.status_label.configure(text=status)

        for difficulty, btn in self.difficulty_buttons.items():
            if difficulty == session.difficulty:
                btn.configure(bg=GameConfig.DIFFICULTY_COLORS[difficulty.name], fg='black')
            else:
                btn.configure(bg='#2d3748', fg='white')

        self.history_list.delete(0, tk.END)
        for description in session.move_list():
            self.history_list.insert(tk.END, description)
        self.history_list.selection_clear(0, tk.END)
        self.history_list.selection_set(session.step)

    def _reset_game(self):
        """Reset the game."""
        print("Resetting game...")
        self.session.new_game()

    def _quit(self):
        """Quit the application."""
        print("Quitting...")
        self.session.close()
        self.root.quit()
        self.root.destroy()

    def run(self):
        """Run the UI main loop."""
        self.root.mainloop()


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="TicTacToe UI")
    parser.add_argument(
        "--difficulty",
        choices=[d.name.lower() for d in Difficulty],
        default=GameConfig.DEFAULT_DIFFICULTY.lower()
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
    parser.add_argument("--seed", type=int, default=GameConfig.RANDOM_SEED)
    parser.add_argument("--debug", action="store_true")

    args = parser.parse_args()

    level = logging.DEBUG if args.debug or GameConfig.DEBUG_MODE else logging.INFO
    logging.basicConfig(level=level, format=GameConfig.LOG_FORMAT)

    ui = TicTacToeUI(
        difficulty=Difficulty.parse(args.difficulty),
        human_mark=Mark.O if args.computer_first else Mark.X,
        seed=args.seed,
        thinking_delay=args.delay
    )
    ui.run()


if __name__ == "__main__":
    main()
