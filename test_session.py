"""
Test script for the game session and the console front end.
Time is driven by a ManualScheduler, so nothing waits for real.

Usage:
    python test_session.py     # Run all tests
    pytest test_session.py
"""

import random
import sys
import threading
import types
from unittest import mock

from tictactoe.board import Board, Mark
from tictactoe.win_checker import GameStatus, StatusKind
from tictactoe.move_validator import INVALID_MOVE, OUT_OF_RANGE
from tictactoe.ai_player import Difficulty, OptimalMoveGenerator
from tictactoe.scheduler import ManualScheduler, ThreadingScheduler
from tictactoe.session import GameSession, SessionState
from tictactoe import session as api

import main as console_main
from main import ConsoleGame, play_selfplay, format_board

DELAY = 0.5


def make_session(difficulty=Difficulty.EASY, human_mark=Mark.X, seed=0):
    scheduler = ManualScheduler()
    session = GameSession(
        difficulty=difficulty,
        human_mark=human_mark,
        scheduler=scheduler,
        rng=random.Random(seed),
        thinking_delay=DELAY
    )
    return session, scheduler


def play_round(session, scheduler, index):
    """Human plays index, then the computer's delay runs out."""
    result = session.play_human(index)
    assert result, result.error_message
    scheduler.advance(DELAY)
    return result


def first_empty(session):
    return session.current_board.empty_cells()[0]


# ==================== STATE MACHINE ====================

def test_new_session():
    print("\n=== Testing GameSession ===")
    session, scheduler = make_session()
    assert session.history_length == 1
    assert session.step == 0
    assert session.current_board == Board.empty()
    assert session.state == SessionState.HUMAN_TO_MOVE
    assert session.status == GameStatus.in_progress(Mark.X)
    assert session.pending_move is None
    assert scheduler.pending == 0


def test_human_move_then_computer_reply_after_delay():
    session, scheduler = make_session()

    assert session.play_human(4)
    assert session.history_length == 2
    assert session.state == SessionState.COMPUTER_THINKING
    pending = session.pending_move
    assert pending is not None and pending.mark == Mark.O

    # Nothing is placed before the delay is over
    assert scheduler.advance(DELAY * 0.8) == 0
    assert session.history_length == 2

    assert scheduler.advance(DELAY * 0.2) == 1
    assert session.history_length == 3
    assert session.step == 2
    assert session.state == SessionState.HUMAN_TO_MOVE
    assert session.current_board[pending.index] == Mark.O
    assert pending.status == "done"
    assert session.pending_move is None
    assert session.history[1].diff(session.history[2]) == pending.index


def test_human_move_rejected_while_computer_thinks():
    session, scheduler = make_session()
    session.play_human(4)

    before = session.history
    result = session.play_human(first_empty(session))
    assert not result
    assert result.error == INVALID_MOVE
    assert session.history == before
    assert session.state == SessionState.COMPUTER_THINKING


def test_invalid_human_moves_are_no_ops():
    session, scheduler = make_session()
    play_round(session, scheduler, 4)

    before = (session.history, session.step, session.state)
    for index in (4, -1, 9, "3"):
        result = session.play_human(index)
        assert not result, f"move {index!r} should be rejected"
        assert result.error == INVALID_MOVE
        assert (session.history, session.step, session.state) == before


def test_jump_to_returns_history_entry():
    session, scheduler = make_session()
    play_round(session, scheduler, 4)
    play_round(session, scheduler, first_empty(session))

    history = session.history
    for step in range(len(history)):
        assert session.jump_to(step)
        assert session.current_board == history[step]
        assert session.history == history, "jumping must not change history"
        scheduler.advance(0)


def test_jump_out_of_range():
    session, scheduler = make_session()
    for step in (-1, 1, 5):
        result = session.jump_to(step)
        assert not result
        assert result.error == OUT_OF_RANGE
    assert session.step == 0
    assert session.history_length == 1


def test_jump_to_human_turn_cancels_pending_move():
    session, scheduler = make_session()
    session.play_human(4)
    pending = session.pending_move

    assert session.jump_to(0)
    assert pending.status == "cancelled"
    assert session.state == SessionState.HUMAN_TO_MOVE
    assert scheduler.pending == 0

    scheduler.advance(DELAY * 4)
    assert session.history_length == 2
    assert session.current_board == Board.empty()


def test_jump_to_computer_turn_thinks_again():
    session, scheduler = make_session()
    play_round(session, scheduler, 0)
    play_round(session, scheduler, first_empty(session))
    assert session.history_length == 5

    # Step 1: X has moved, O (the computer) is to move
    assert session.jump_to(1)
    assert session.state == SessionState.COMPUTER_THINKING
    assert session.history_length == 5, "jumping alone keeps later moves"

    scheduler.advance(DELAY)
    assert session.step == 2
    assert session.history_length == 3, "the computer's new move replaces the old future"
    assert session.state == SessionState.HUMAN_TO_MOVE


def test_move_after_rewind_truncates_history():
    session, scheduler = make_session()
    play_round(session, scheduler, 0)
    play_round(session, scheduler, first_empty(session))
    old = session.history
    assert len(old) == 5

    assert session.jump_to(2)
    index = [i for i in session.current_board.empty_cells() if old[3][i] == Mark.EMPTY][0]
    assert session.play_human(index)

    assert session.history_length == 4
    assert session.history[:3] == old[:3]
    assert session.history[3] != old[3]
    assert session.history[3][index] == Mark.X
    assert session.step == 3


def test_new_game_cancels_pending_move():
    session, scheduler = make_session()
    session.play_human(4)
    pending = session.pending_move

    session.new_game()
    assert pending.status == "cancelled"
    assert session.history_length == 1
    assert session.state == SessionState.HUMAN_TO_MOVE

    assert scheduler.advance(DELAY * 2) == 0
    assert session.history_length == 1


def test_difficulty_change_recomputes_pending_move():
    session, scheduler = make_session(difficulty=Difficulty.EASY)
    session.play_human(0)
    old = session.pending_move

    session.set_difficulty("hard")
    assert old.status == "cancelled"
    assert session.difficulty == Difficulty.HARD
    assert session.pending_move.difficulty == Difficulty.HARD
    assert scheduler.pending == 1

    scheduler.advance(DELAY)
    assert session.history_length == 3
    # Minimax answers a corner opening with the centre
    assert session.current_board[4] == Mark.O


def test_difficulty_change_applies_to_next_move():
    session, scheduler = make_session(difficulty=Difficulty.EASY)
    play_round(session, scheduler, 0)
    before = session.history

    session.set_difficulty(Difficulty.MEDIUM)
    assert session.history == before
    assert session.state == SessionState.HUMAN_TO_MOVE
    assert scheduler.pending == 0


def test_full_draw_rejects_moves():
    session, scheduler = make_session(difficulty=Difficulty.HARD)
    human = OptimalMoveGenerator()

    while session.state != SessionState.TERMINAL:
        if session.state == SessionState.HUMAN_TO_MOVE:
            assert session.play_human(human.select_move(session.current_board, Mark.X))
        else:
            scheduler.advance(DELAY)

    assert session.current_board.is_full()
    assert session.status.kind == StatusKind.DRAW
    assert session.history_length == 10

    for index in range(9):
        result = session.play_human(index)
        assert not result
        assert result.error == INVALID_MOVE
    assert session.history_length == 10


def test_computer_plays_first_when_human_is_o():
    session, scheduler = make_session(human_mark=Mark.O, difficulty=Difficulty.HARD)
    assert session.computer_mark == Mark.X
    assert session.state == SessionState.COMPUTER_THINKING
    assert not session.play_human(4)

    scheduler.advance(DELAY)
    assert session.current_board[0] == Mark.X
    assert session.state == SessionState.HUMAN_TO_MOVE
    assert session.status == GameStatus.in_progress(Mark.O)

    assert session.play_human(4)
    assert session.history[-1][4] == Mark.O


def test_computer_win_ends_game():
    session, scheduler = make_session(difficulty=Difficulty.HARD, human_mark=Mark.O)
    scheduler.advance(DELAY)
    assert session.current_board[0] == Mark.X

    # Answering a corner opening anywhere but the centre loses
    while session.state != SessionState.TERMINAL:
        if session.state == SessionState.HUMAN_TO_MOVE:
            play_round(session, scheduler, first_empty(session))
        else:
            scheduler.advance(DELAY)

    assert session.history[2][1] == Mark.O
    assert session.status == GameStatus.win(Mark.X)
    assert session.status.is_over

    before = session.history
    for index in session.current_board.empty_cells():
        assert not session.play_human(index)
    assert session.history == before


def test_listeners_are_notified():
    session, scheduler = make_session()
    calls = []
    session.add_listener(lambda s: calls.append((s.step, s.state)))

    session.play_human(4)
    scheduler.advance(DELAY)
    session.jump_to(0)

    assert calls == [
        (1, SessionState.COMPUTER_THINKING),
        (2, SessionState.HUMAN_TO_MOVE),
        (0, SessionState.HUMAN_TO_MOVE),
    ]


def test_removed_listener_is_not_called():
    session, scheduler = make_session()
    calls = []

    def listener(s):
        calls.append(s.step)

    session.add_listener(listener)

    session.play_human(4)
    session.remove_listener(listener)
    scheduler.advance(DELAY)

    assert calls == [1]
    assert session.history_length == 3


def test_is_human_turn_follows_state():
    session, scheduler = make_session(human_mark=Mark.O)
    assert not session.is_human_turn

    scheduler.advance(DELAY)
    assert session.is_human_turn

    session.play_human(first_empty(session))
    assert not session.is_human_turn

    session.jump_to(1)
    assert session.is_human_turn


def test_move_list():
    session, scheduler = make_session()
    play_round(session, scheduler, 4)
    assert session.move_list() == ["Go to game start", "Go to move #1", "Go to move #2"]


def test_functional_interface():
    scheduler = ManualScheduler()
    session = api.new_game(difficulty="medium", scheduler=scheduler, thinking_delay=DELAY)

    assert api.history_length(session) == 1
    assert api.current_board(session) == Board.empty()
    assert api.play_human(session, 4)
    assert not api.play_human(session, 4)
    scheduler.advance(DELAY)
    assert api.history_length(session) == 3
    assert api.current_status(session) == GameStatus.in_progress(Mark.X)

    api.set_difficulty(session, Difficulty.HARD)
    assert session.difficulty == Difficulty.HARD
    assert api.jump_to(session, 1)
    assert not api.jump_to(session, 3)


def test_threading_scheduler_commits_move():
    session = GameSession(
        difficulty=Difficulty.HARD,
        scheduler=ThreadingScheduler(),
        thinking_delay=0.01
    )
    done = threading.Event()
    session.add_listener(lambda s: done.set() if s.history_length == 3 else None)

    assert session.play_human(0)
    assert done.wait(timeout=5), "computer never moved"
    assert session.current_board[4] == Mark.O


def test_threading_scheduler_cancel():
    fired = threading.Event()
    handle = ThreadingScheduler().call_later(0.05, fired.set)
    handle.cancel()
    assert not fired.wait(timeout=0.2)


def test_manual_scheduler_order_and_cancel():
    scheduler = ManualScheduler()
    calls = []
    scheduler.call_later(2, lambda: calls.append("b"))
    scheduler.call_later(1, lambda: calls.append("a"))
    cancelled = scheduler.call_later(1.5, lambda: calls.append("x"))
    cancelled.cancel()

    assert scheduler.pending == 2
    assert scheduler.advance(1) == 1
    assert scheduler.run_all() == 1
    assert calls == ["a", "b"]
    assert scheduler.pending == 0


# ==================== CONSOLE ====================

def test_console_game_commands():
    print("\n=== Testing ConsoleGame ===")
    commands = iter(["5", "5", "h", "d hard", "j 0", "x", "q"])
    output = []
    game = ConsoleGame(
        difficulty=Difficulty.EASY,
        thinking_delay=0,
        seed=1,
        input_func=lambda prompt: next(commands),
        output_func=output.append
    )
    game.run()

    text = "\n".join(output)
    assert "Illegal move" in text
    assert "Go to game start" in text
    assert "Difficulty set to: hard" in text
    assert "Unknown command" in text
    assert game.session.step == 0
    assert game.session.history_length == 3
    assert game.session.difficulty == Difficulty.HARD


def test_console_rejects_non_decimal_digits():
    # "²".isdigit() is True but int("²") raises
    output = []
    game = ConsoleGame(thinking_delay=0, output_func=output.append)

    assert game.handle_command("²")
    assert game.handle_command("j ²")
    assert game.handle_command("j ٣")

    assert output.count("Unknown command. Type 1-9, j <step>, h, d <level>, n or q.") == 2
    # Other decimal scripts parse, so this one reaches the range check
    assert output[-1] == "Invalid step 3. Must be 0-0."
    assert game.session.history_length == 1
    assert game.session.step == 0


def test_console_stops_on_eof():
    def no_input(prompt):
        raise EOFError

    game = ConsoleGame(thinking_delay=0, input_func=no_input, output_func=lambda *a: None)
    game.run()
    assert game.session.history_length == 1


def test_ui_flag_forwards_delay():
    created = {}

    class FakeUI:
        def __init__(self, **kwargs):
            created.update(kwargs)

        def run(self):
            pass

    fake_ui = types.ModuleType("ui")
    fake_ui.TicTacToeUI = FakeUI
    argv = ["main.py", "--ui", "--delay", "0.25", "--difficulty", "hard", "--computer-first"]

    with mock.patch.dict(sys.modules, {"ui": fake_ui}), mock.patch.object(sys, "argv", argv):
        assert console_main.main() == 0

    assert created["thinking_delay"] == 0.25
    assert created["difficulty"] == Difficulty.HARD
    assert created["human_mark"] == Mark.O


def test_format_board_numbers_empty_cells():
    text = format_board(Board.from_string("X___O____"))
    assert text.splitlines()[0] == " X | 2 | 3"


def test_selfplay():
    assert play_selfplay(2) == {"X": 0, "O": 0, "draw": 2}
    results = play_selfplay(20, Difficulty.EASY, Difficulty.HARD, seed=5)
    assert results["X"] == 0, "minimax lost to random play"
    assert sum(results.values()) == 20


def run_all_tests():
    """Run all tests."""
    print("=" * 60)
    print("   TicTacToe - Session Tests")
    print("=" * 60)

    tests = [(name, fn) for name, fn in globals().items()
             if name.startswith("test_") and callable(fn)]

    failed = 0
    for name, fn in tests:
        try:
            fn()
            print(f"  {name}: ✓ PASS")
        except AssertionError as e:
            failed += 1
            print(f"  {name}: ✗ FAIL {e}")

    print("=" * 60)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(run_all_tests())
