"""Error kinds raised by the game engine.

Each error carries the HTTP status the request layer answers with, so routes
can let them propagate and rely on the handler registered in ``create_app``.
"""


class GameError(Exception):
    status_code = 400

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self):
        payload = {'error': self.message}
        payload.update(self.details)
        return payload


class ValidationError(GameError):
    """Malformed or out-of-range input. Not worth retrying."""
    status_code = 422


class NotFound(GameError):
    status_code = 404


class Forbidden(GameError):
    status_code = 403


class Conflict(GameError):
    """Lost a race against another operation on the same game. Safe to retry once."""
    status_code = 409


class AlreadySubmitted(GameError):
    status_code = 409


class RoundClosed(Conflict):
    """The round the caller targeted is no longer accepting submissions."""


class DeckExhausted(GameError):
    status_code = 409

    def __init__(self, message, game_over=False, **details):
        super().__init__(message, game_over=game_over, **details)
        self.game_over = game_over
