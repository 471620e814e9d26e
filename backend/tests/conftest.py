import os
import sys
import itertools
import pytest

# Ensure the backend root (containing the `partycards` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from partycards import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = ['http://localhost:5173']
    HAND_LIMIT = 7
    GAME_CODE_LENGTH = 4
    GAME_CODE_ALPHABET = 'ABCDEFGHJKMNPQRSTUVWXYZ23456789'
    CARD_PACKS_PATH = os.path.join(BACKEND_ROOT, 'data', 'sample_pack.json')


class RecordingNotifier:
    def __init__(self):
        self.events = []

    def publish(self, event):
        self.events.append(event)

    def of(self, event_type):
        return [e for e in self.events if isinstance(e, event_type)]

    def clear(self):
        self.events.clear()


@pytest.fixture()
def database_uri():
    return TestConfig.SQLALCHEMY_DATABASE_URI


@pytest.fixture()
def flask_app(database_uri):
    class Config(TestConfig):
        SQLALCHEMY_DATABASE_URI = database_uri

    application = create_app(Config)
    with application.app_context():
        # Ensure models are imported so tables are created
        import partycards.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def notifier(flask_app):
    recorder = RecordingNotifier()
    flask_app.extensions['partycards.notifier'] = recorder
    return recorder


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


_pack_names = itertools.count(1)


@pytest.fixture()
def make_expansion(flask_app):
    """Build an expansion with one black card per entry in ``picks`` and ``white`` white cards."""
    from partycards.models import Expansion, BlackCard, WhiteCard

    def _make(picks=(1, 1, 1, 1, 1, 1, 1, 1, 1, 1), white=60, name=None):
        expansion = Expansion(name=name or f'Pack {next(_pack_names)}')
        db.session.add(expansion)
        for i, pick in enumerate(picks):
            db.session.add(BlackCard(text=f'Prompt {i} ____', pick=pick, expansion=expansion))
        for i in range(white):
            db.session.add(WhiteCard(text=f'Answer {i}', expansion=expansion))
        db.session.commit()
        return expansion

    return _make


@pytest.fixture()
def make_game(make_expansion, notifier):
    """Create a game with ``players`` members (first one is creator and judge)."""
    from partycards.services import games as engine

    def _make(players=3, expansion=None, **expansion_kwargs):
        expansion = expansion or make_expansion(**expansion_kwargs)
        game, creator = engine.create_game('Player 1', [expansion.id])
        game_id = game.id
        member_ids = [creator.id]
        for n in range(2, players + 1):
            _, player = engine.join_game(game.game_code, f'Player {n}')
            member_ids.append(player.id)
        return game_id, member_ids

    return _make


@pytest.fixture()
def submit_all():
    """Have every non-judge member play the first ``pick`` cards of their hand."""
    from partycards.models import Game, HandEntry
    from partycards.services import games as engine

    def _submit(game_id):
        game = db.session.get(Game, game_id)
        pick = game.current_black_card.pick
        judge_id = game.judge_id
        submitted = {}
        for player_id in [p.id for p in game.players if p.id != judge_id]:
            entries = (HandEntry.live()
                       .filter_by(game_id=game_id, player_id=player_id, selected=False)
                       .order_by(HandEntry.id).limit(pick).all())
            ids = [e.id for e in entries]
            engine.submit_cards(game_id, player_id, ids, pick)
            submitted[player_id] = ids
        return submitted

    return _submit
