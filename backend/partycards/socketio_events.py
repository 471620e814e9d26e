from flask_socketio import join_room, leave_room, emit
from partycards import socketio
from partycards.models import Player
from partycards.services.games.notifier import NAMESPACE, game_room, player_room
from partycards.services.games.session import find_game
from partycards.errors import GameError


def handle_connect():
    emit('connected', {'message': f'Connected to {NAMESPACE}'})


def handle_join_game(data):
    """Subscribe to a game's broadcasts, and to the player's own channel if given."""
    game_code = (data or {}).get('game_code')
    player_id = (data or {}).get('player_id')
    if not game_code:
        emit('error', {'message': 'game_code is required'})
        return
    rooms = [game_room(game_code)]
    if player_id is not None:
        try:
            game = find_game(game_code)
        except GameError as exc:
            emit('error', {'message': exc.message})
            return
        if not Player.query.filter_by(id=player_id, game_id=game.id).first():
            emit('error', {'message': 'You are not a player in this game'})
            return
        rooms.append(player_room(game_code, player_id))
    for room in rooms:
        join_room(room)
    emit('joined', {'rooms': rooms})


def handle_leave_game(data):
    game_code = (data or {}).get('game_code')
    player_id = (data or {}).get('player_id')
    if not game_code:
        emit('error', {'message': 'game_code is required'})
        return
    rooms = [game_room(game_code)]
    if player_id is not None:
        rooms.append(player_room(game_code, player_id))
    for room in rooms:
        leave_room(room)
    emit('left', {'rooms': rooms})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = [NAMESPACE, '/'] if testing else [NAMESPACE]
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('join_game', handle_join_game, namespace=namespace)
        socketio.on_event('leave_game', handle_leave_game, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
