from flask import current_app

from partycards import db
from partycards.errors import DeckExhausted
from partycards.models import Game, HandEntry
from . import deck


def hand_limit() -> int:
    return int(current_app.config.get('HAND_LIMIT', Game.HAND_LIMIT))


def live_hand(game, player):
    """Cards the player currently holds, oldest first."""
    return HandEntry.live().filter_by(game_id=game.id, player_id=player.id).order_by(HandEntry.id)


def draw(game, player, count):
    """Deal ``count`` unseen white cards to ``player``. All or nothing."""
    cards = deck.draw_white_cards(game, player, count)
    entries = [HandEntry(game_id=game.id, player_id=player.id, white_card_id=c.id, white_card=c) for c in cards]
    db.session.add_all(entries)
    db.session.flush()
    return entries


def top_up(game, player):
    """Refill the hand towards HAND_LIMIT with whatever unseen cards remain.

    Never raises on a short supply: the hand ends at
    ``min(HAND_LIMIT, live + unseen)``.
    """
    missing = hand_limit() - live_hand(game, player).count()
    if missing <= 0:
        return []
    return draw(game, player, min(missing, deck.white_cards_left(game, player)))


def replenish(game, player):
    """Top up on request; a short hand with nothing left to draw is an error."""
    missing = hand_limit() - live_hand(game, player).count()
    if missing <= 0:
        return []
    if deck.white_cards_left(game, player) == 0:
        raise DeckExhausted(f'No white cards left for player {player.id}', player_id=player.id)
    return top_up(game, player)
