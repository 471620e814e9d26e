from partycards import db, socketio
from partycards.models import Game
from partycards.services import games as engine


def _connected(sio_client):
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')
    # Flush any initial events
    sio_client.get_received('/ws')
    return sio_client


def test_socket_connect_and_join(sio_client):
    client = _connected(sio_client)

    client.emit('join_game', {'game_code': 'abcd'}, namespace='/ws')
    received = client.get_received('/ws')

    joined = [pkt for pkt in received if pkt['name'] == 'joined']
    assert joined and joined[0]['args'][0]['rooms'] == ['game:ABCD']


def test_join_requires_game_code(sio_client):
    client = _connected(sio_client)

    client.emit('join_game', {}, namespace='/ws')

    assert any(pkt['name'] == 'error' for pkt in client.get_received('/ws'))


def test_player_channel_requires_membership(sio_client, make_game):
    game_id, _ = make_game(players=1)
    code = db.session.get(Game, game_id).game_code
    client = _connected(sio_client)

    client.emit('join_game', {'game_code': code, 'player_id': 999}, namespace='/ws')

    assert any(pkt['name'] == 'error' for pkt in client.get_received('/ws'))


def test_ping(sio_client):
    client = _connected(sio_client)

    client.emit('ping', {'n': 1}, namespace='/ws')

    assert {'name': 'pong', 'args': [{'n': 1}], 'namespace': '/ws'} in client.get_received('/ws')


def test_rotation_events_reach_game_and_player_rooms(flask_app, make_expansion):
    expansion = make_expansion(picks=(1, 1, 1))
    game, rick = engine.create_game('Rick', [expansion.id])
    code = game.game_code
    _, morty = engine.join_game(code, 'Morty')
    game_id, rick_id, morty_id = game.id, rick.id, morty.id

    watcher = socketio.test_client(flask_app, namespace='/ws')
    watcher.emit('join_game', {'game_code': code, 'player_id': morty_id}, namespace='/ws')
    watcher.get_received('/ws')

    engine.draw_black_card(game_id)
    entry = engine.game_view(db.session.get(Game, game_id), morty)['hand'][0]
    engine.submit_cards(game_id, morty_id, [entry['id']], 1)
    engine.rotate(game_id, rick_id)

    names = [pkt['name'] for pkt in watcher.get_received('/ws')]
    assert 'cards_submitted' in names
    assert 'judge_rotated' in names
    assert 'cards_dealt' in names
    watcher.disconnect(namespace='/ws')


def test_notifier_failure_does_not_fail_the_operation(flask_app, make_expansion):
    class BrokenNotifier:
        def publish(self, event):
            raise ConnectionError('push backend down')

    flask_app.extensions['partycards.notifier'] = BrokenNotifier()
    expansion = make_expansion()

    game, player = engine.create_game('Rick', [expansion.id])

    assert db.session.get(Game, game.id).judge_id == player.id
