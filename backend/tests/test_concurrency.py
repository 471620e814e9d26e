import threading

import pytest

from partycards import db
from partycards.errors import GameError
from partycards.models import Game, HandEntry
from partycards.services import games as engine
from partycards.services.games import session as session_service


@pytest.fixture()
def database_uri(tmp_path):
    # Threads need a database they can all open
    return f"sqlite:///{tmp_path / 'partycards.db'}"


def _run_together(flask_app, calls):
    """Start every call on its own thread behind one barrier and collect outcomes by key."""
    barrier = threading.Barrier(len(calls))
    outcomes = {}

    def worker(key, fn, args):
        with flask_app.app_context():
            barrier.wait()
            try:
                fn(*args)
                outcomes[key] = 'ok'
            except GameError as exc:
                outcomes[key] = type(exc).__name__
            except Exception as exc:
                outcomes[key] = repr(exc)

    threads = [threading.Thread(target=worker, args=(key, fn, args)) for key, (fn, args) in calls.items()]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    return outcomes


def test_submissions_racing_a_rotation(flask_app, make_game):
    game_id, member_ids = make_game(players=6, picks=(1, 1, 1))
    engine.draw_black_card(game_id)
    judge_id, *submitters = member_ids
    chosen = {
        pid: HandEntry.live().filter_by(game_id=game_id, player_id=pid).order_by(HandEntry.id).first().id
        for pid in submitters
    }
    db.session.remove()

    calls = {'rotate': (engine.rotate, (game_id, judge_id))}
    for pid in submitters:
        calls[pid] = (engine.submit_cards, (game_id, pid, [chosen[pid]], 1))
    outcomes = _run_together(flask_app, calls)

    game = db.session.get(Game, game_id)
    new_judge = game.judge_id
    assert outcomes.pop('rotate') == 'ok'
    assert game.round_number == 2
    assert new_judge == submitters[0]
    for pid, outcome in outcomes.items():
        assert outcome in ('ok', 'Forbidden'), (pid, outcome)
        entry = db.session.get(HandEntry, chosen[pid])
        if outcome == 'Forbidden':
            # Only the new judge can lose the race, and its card stays in hand
            assert pid == new_judge
            assert entry.deleted_at is None and not entry.selected
        elif entry.submitted_round == 1:
            assert entry.deleted_at is not None
        else:
            assert entry.submitted_round == 2
            assert entry.deleted_at is None and entry.selected
    for pid in member_ids:
        assert HandEntry.live().filter_by(game_id=game_id, player_id=pid).count() == 7


def test_games_created_together_get_distinct_codes(flask_app, make_expansion, notifier, monkeypatch):
    expansion_id = make_expansion().id
    db.session.remove()
    codes = iter(['AAAA', 'AAAA', 'AAAA', 'BBBB', 'AAAA', 'BBBB', 'CCCC'])
    monkeypatch.setattr(session_service.random, 'choices', lambda alphabet, k: list(next(codes)))

    outcomes = _run_together(flask_app, {
        name: (engine.create_game, (name, [expansion_id])) for name in ('Rick', 'Morty', 'Summer')
    })

    assert outcomes == {'Rick': 'ok', 'Morty': 'ok', 'Summer': 'ok'}
    assert sorted(g.game_code for g in Game.query.all()) == ['AAAA', 'BBBB', 'CCCC']
