from flask import Blueprint, jsonify, request

from partycards.errors import ValidationError, NotFound
from partycards.models import Player
from partycards.services import games as engine


games = Blueprint('games', __name__)


def _int_field(data, key, required=True):
    value = data.get(key)
    if value is None:
        if required:
            raise ValidationError(f'{key} is required')
        return None
    if isinstance(value, bool):
        raise ValidationError(f'{key} must be an integer')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{key} must be an integer')


def _int_list_field(data, key):
    values = data.get(key)
    if not isinstance(values, list):
        raise ValidationError(f'{key} must be a list')
    return [_int_field({key: v}, key) for v in values]


def _viewer(game, player_id):
    if player_id is None:
        return None
    player = Player.query.filter_by(id=player_id, game_id=game.id).first()
    if not player:
        raise NotFound(f'Player {player_id} is not in this game')
    return player


@games.route('/create', methods=['POST'])
def create_game():
    data = request.get_json(silent=True) or {}
    expansion_ids = data.get('expansion_ids')
    if expansion_ids is not None and not isinstance(expansion_ids, list):
        raise ValidationError('expansion_ids must be a list')
    game, player = engine.create_game(data.get('name'), expansion_ids or [])
    view = engine.game_view(game, player)
    return jsonify({'player': player.to_dict(), 'hand': view.pop('hand'), 'game': view}), 201


@games.route('/join', methods=['POST'])
def join_game():
    data = request.get_json(silent=True) or {}
    game_code = data.get('game_code')
    if not game_code:
        raise ValidationError('Game code is required')
    game, player = engine.join_game(game_code, data.get('name'))
    view = engine.game_view(game, player)
    return jsonify({'player': player.to_dict(), 'hand': view.pop('hand'), 'game': view}), 201


@games.route('/<string:game_code>/state', methods=['GET'])
def get_game_state(game_code):
    game = engine.find_game(game_code)
    viewer = _viewer(game, _int_field(request.args, 'player_id', required=False))
    return jsonify(engine.game_view(game, viewer))


@games.route('/<string:game_code>/black-card', methods=['POST'])
def draw_black_card(game_code):
    game = engine.find_game(game_code)
    card = engine.draw_black_card(game.id)
    return jsonify(card.to_dict())


@games.route('/<string:game_code>/black-card/discard', methods=['POST'])
def discard_black_card(game_code):
    game = engine.find_game(game_code)
    game = engine.discard_black_card(game.id)
    return jsonify(engine.game_view(game))


@games.route('/<string:game_code>/hand/draw', methods=['POST'])
def draw_white_cards(game_code):
    data = request.get_json(silent=True) or {}
    player_id = _int_field(data, 'player_id')
    game = engine.find_game(game_code)
    entries = engine.draw_white_cards(game.id, player_id)
    return jsonify({'cards': [e.to_dict() for e in entries]})


@games.route('/<string:game_code>/submit', methods=['POST'])
def submit_cards(game_code):
    data = request.get_json(silent=True) or {}
    player_id = _int_field(data, 'player_id')
    hand_entry_ids = _int_list_field(data, 'hand_entry_ids')
    amount = _int_field(data, 'amount')
    expected_round = _int_field(data, 'round', required=False)
    game = engine.find_game(game_code)
    engine.submit_cards(game.id, player_id, hand_entry_ids, amount, expected_round=expected_round)
    return '', 204


@games.route('/<string:game_code>/rotate', methods=['POST'])
def rotate(game_code):
    data = request.get_json(silent=True) or {}
    player_id = _int_field(data, 'player_id')
    winner_id = _int_field(data, 'winner_id', required=False)
    game = engine.find_game(game_code)
    game = engine.rotate(game.id, player_id, winner_id=winner_id)
    return jsonify(engine.game_view(game))
