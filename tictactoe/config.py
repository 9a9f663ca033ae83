"""
Game configuration for the TicTacToe engine.
Defaults for the session, the computer opponent, logging and the window.
"""


class GameConfig:
    """
    Configuration class for game settings.
    Sessions and the command line can override any of these.
    """

    # ==================== SESSION SETTINGS ====================
    # How long the computer "thinks" before its move is placed
    THINKING_DELAY_S = 0.5

    # X always moves first; the human plays X unless told otherwise
    HUMAN_MARK = "X"

    # EASY, MEDIUM or HARD
    DEFAULT_DIFFICULTY = "EASY"

    # Seed for the computer's random choices (None = unseeded)
    RANDOM_SEED = None

    # ==================== MINIMAX SCORES ====================
    # No depth discount: a win is worth the same however far away it is
    WIN_SCORE = 10
    LOSS_SCORE = -10
    DRAW_SCORE = 0

    # ==================== LOGGING ====================
    DEBUG_MODE = False
    LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    # ==================== WINDOW SETTINGS ====================
    WINDOW_TITLE = "TicTacToe"
    WINDOW_SIZE = "640x420"
    BACKGROUND = "#1a1a2e"
    CELL_BACKGROUND = "#16213e"
    WIN_BACKGROUND = "#065f46"
    X_COLOR = "#00d4ff"
    O_COLOR = "#f87171"
    FONT = "Segoe UI"

    # Button colours per difficulty
    DIFFICULTY_COLORS = {
        "EASY": "#4ade80",
        "MEDIUM": "#fbbf24",
        "HARD": "#f87171",
    }
