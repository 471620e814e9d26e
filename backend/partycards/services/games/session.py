import random
import threading

from flask import current_app

from partycards import db
from partycards.errors import NotFound, ValidationError, Forbidden
from partycards.models import Expansion, Game, Player
from . import hand
from .locking import game_transaction, unit_of_work
from .notifier import CardsDealt
from .submissions import has_submitted, submitted_entries


# Held from code generation until the new game commits
_create_lock = threading.Lock()


def normalize_game_code(code) -> str:
    return (code or '').strip().upper()


def generate_game_code() -> str:
    """Generate a short join code not used by any game that is still running."""
    length = int(current_app.config.get('GAME_CODE_LENGTH', 4))
    alphabet = current_app.config.get('GAME_CODE_ALPHABET')
    while True:
        code = ''.join(random.choices(alphabet, k=length))
        if not Game.query.filter(Game.game_code == code, Game.status != Game.ENDED).first():
            return code


def find_game(code, active_only=False):
    """Resolve a join code, preferring the running game over ended ones that reused it."""
    code = normalize_game_code(code)
    game = Game.query.filter(Game.game_code == code, Game.status != Game.ENDED).first()
    if game is None and not active_only:
        game = Game.query.filter_by(game_code=code).order_by(Game.id.desc()).first()
    if game is None:
        raise NotFound(f'Game {code} not found')
    return game


def _clean_name(name) -> str:
    name = (name or '').strip() if isinstance(name, str) else ''
    if not name:
        raise ValidationError('Player name is required')
    if len(name) > 64:
        raise ValidationError('Player name must be at most 64 characters')
    return name


def create_game(creator_name, expansion_ids):
    """Create a game with its creator as first member and judge, holding a fresh hand."""
    name = _clean_name(creator_name)
    if not expansion_ids:
        raise ValidationError('Select at least one expansion')
    try:
        wanted = {int(i) for i in expansion_ids}
    except (TypeError, ValueError):
        raise ValidationError('Expansion ids must be integers')
    expansions = Expansion.query.filter(Expansion.id.in_(wanted)).all()
    unknown = sorted(wanted - {e.id for e in expansions})
    if unknown:
        raise ValidationError('Unknown expansion(s)', expansion_ids=unknown)

    with _create_lock, unit_of_work() as uow:
        game = Game(game_code=generate_game_code(), status=Game.AWAITING_BLACK_CARD, round_number=0)
        game.expansions = expansions
        creator = Player(name=name, game=game, score=0)
        db.session.add_all([game, creator])
        db.session.flush()
        game.judge = creator
        hand.top_up(game, creator)
        uow.emit(CardsDealt(game, creator, hand.live_hand(game, creator).all()))
        current_app.logger.info(
            f"[create] game={game.id} code={game.game_code} creator={creator.id} expansions={sorted(wanted)}"
        )
    return game, creator


def join_game(game_code, player_name):
    name = _clean_name(player_name)
    game = find_game(game_code, active_only=True)
    with game_transaction(game.id) as uow:
        game = uow.game
        if not game.is_active:
            raise NotFound(f'Game {game.game_code} not found')
        player = Player(name=name, game=game, score=0)
        db.session.add(player)
        db.session.flush()
        hand.top_up(game, player)
        uow.emit(CardsDealt(game, player, hand.live_hand(game, player).all()))
        current_app.logger.info(f"[join] game={game.id} player={player.id} members={len(game.players)}")
    return game, player


def draw_white_cards(game_id, player_id):
    """Refill a player's hand on request and return the newly dealt entries."""
    with game_transaction(game_id) as uow:
        game = uow.game
        player = Player.query.filter_by(id=player_id, game_id=game.id).first()
        if player is None:
            raise Forbidden(f'Player {player_id} is not a member of this game')
        entries = hand.replenish(game, player)
        if entries:
            uow.emit(CardsDealt(game, player, hand.live_hand(game, player).all()))
        current_app.logger.info(f"[draw] game={game.id} player={player.id} drew={len(entries)}")
        return entries


def game_view(game, viewer=None):
    """Serializable state of a game as seen by ``viewer`` (a Player or None)."""
    players = []
    for p in game.players:
        pd = p.to_dict()
        pd['is_judge'] = p.id == game.judge_id
        pd['has_submitted'] = has_submitted(game, p) if game.status == Game.ROUND_OPEN else False
        players.append(pd)

    view = {
        'id': game.id,
        'game_code': game.game_code,
        'status': game.status,
        'round': game.round_number,
        'judge_id': game.judge_id,
        'current_black_card': game.current_black_card.to_dict() if game.current_black_card else None,
        'players': players,
        'expansion_ids': [e.id for e in game.expansions],
    }
    if viewer is not None:
        view['hand'] = [e.to_dict() for e in hand.live_hand(game, viewer)]
        if viewer.id == game.judge_id and game.status == Game.ROUND_OPEN:
            grouped = {}
            for entry in submitted_entries(game):
                grouped.setdefault(entry.player_id, []).append(entry.to_dict())
            view['submissions'] = [{'player_id': pid, 'cards': cards} for pid, cards in grouped.items()]
    return view
