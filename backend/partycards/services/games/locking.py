"""Per-game serialization and the unit of work every mutation runs in.

Only one mutating operation may be in flight per game. Each operation takes
the game's lock for its whole duration, reads and writes inside a single
database transaction, and commits or rolls back before releasing it.
Different games never share a lock.
"""
import threading
from contextlib import contextmanager

from partycards import db
from partycards.errors import NotFound
from partycards.models import Game
from .notifier import publish_all


_registry_lock = threading.Lock()
_game_locks: dict[int, threading.RLock] = {}


def game_lock(game_id: int) -> threading.RLock:
    with _registry_lock:
        lock = _game_locks.get(game_id)
        if lock is None:
            lock = _game_locks[game_id] = threading.RLock()
        return lock


def forget(game_id: int) -> None:
    """Drop the lock of a game that will not be mutated again."""
    with _registry_lock:
        _game_locks.pop(game_id, None)


class UnitOfWork:
    def __init__(self, game=None):
        self.game = game
        self.events = []

    def emit(self, event) -> None:
        self.events.append(event)


@contextmanager
def unit_of_work():
    """Run a block as one transaction and publish its events after commit."""
    uow = UnitOfWork()
    try:
        yield uow
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    publish_all(uow.events)


@contextmanager
def game_transaction(game_id: int):
    """Lock ``game_id``, load it ``FOR UPDATE`` and yield a unit of work bound to it."""
    with game_lock(game_id):
        finished = False
        try:
            with unit_of_work() as uow:
                game = Game.query.filter_by(id=game_id).with_for_update().populate_existing().first()
                finished = game is None or game.status == Game.ENDED
                if game is None:
                    raise NotFound(f'Game {game_id} not found')
                uow.game = game
                yield uow
                finished = game.status == Game.ENDED
        finally:
            # Missing and ended games take no further writes
            if finished:
                forget(game_id)
