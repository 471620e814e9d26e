"""Stateless random draws from a card pool minus an exclusion set.

Callers own the exclusion set (a game's black card history, a player's
hand entries) and must call these inside the transaction that records the
draw, so the read and the write can't be split by another request.
"""
from partycards import db
from partycards.errors import DeckExhausted
from partycards.models import BlackCard, WhiteCard, GameBlackCard, HandEntry


def remaining(pool, card_model, excluded):
    return pool.filter(~card_model.id.in_(excluded))


def draw(pool, card_model, excluded, count=1):
    """Draw ``count`` distinct cards uniformly from ``pool`` minus ``excluded``.

    All or nothing: raises DeckExhausted without drawing if fewer than
    ``count`` cards are left.
    """
    if count <= 0:
        return []
    candidates = remaining(pool, card_model, excluded)
    available = candidates.count()
    if available < count:
        raise DeckExhausted(
            f'Only {available} card(s) left to draw, {count} requested',
            requested=count,
            available=available,
        )
    return candidates.order_by(db.func.random()).limit(count).all()


def black_card_pool(game):
    expansion_ids = [e.id for e in game.expansions]
    return BlackCard.query.filter(BlackCard.expansion_id.in_(expansion_ids))


def white_card_pool(game):
    expansion_ids = [e.id for e in game.expansions]
    return WhiteCard.query.filter(WhiteCard.expansion_id.in_(expansion_ids))


def drawn_black_card_ids(game):
    return db.select(GameBlackCard.black_card_id).where(GameBlackCard.game_id == game.id)


def drawn_white_card_ids(game, player):
    # Tombstoned entries included: a card is never dealt to the same player twice
    return db.select(HandEntry.white_card_id).where(
        HandEntry.game_id == game.id,
        HandEntry.player_id == player.id,
    )


def draw_black_card(game):
    try:
        return draw(black_card_pool(game), BlackCard, drawn_black_card_ids(game))[0]
    except DeckExhausted:
        raise DeckExhausted('No black cards left in this game', game_over=True)


def draw_white_cards(game, player, count):
    return draw(white_card_pool(game), WhiteCard, drawn_white_card_ids(game, player), count)


def white_cards_left(game, player) -> int:
    return remaining(white_card_pool(game), WhiteCard, drawn_white_card_ids(game, player)).count()
