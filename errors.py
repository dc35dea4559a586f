# errors.py


class InvalidConfiguration(ValueError):
    """Raised when a game or agent is created with unusable options
    (for instance a pyramid with fewer than two layers)."""


class InvalidMove(ValueError):
    """
    Raised when a line cannot be claimed: the game is finished, the line id
    is out of range, the line is already taken, or it is not that player's turn.

    The game state is left untouched, so the caller may simply try again.
    """

    def __init__(self, message, line_id=None, player=None):
        super().__init__(message)
        self.line_id = line_id
        self.player = player


class SearchExhausted(RuntimeError):
    """Raised when the search is asked for a move but no line is left to claim."""
