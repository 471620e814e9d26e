import pytest

from partycards import db
from partycards.errors import DeckExhausted
from partycards.models import Game, Player, WhiteCard, HandEntry
from partycards.services.games import deck


def test_draw_excludes_already_drawn_cards(make_expansion, flask_app):
    expansion = make_expansion(picks=(1,), white=10)
    pool = WhiteCard.query.filter_by(expansion_id=expansion.id)
    all_ids = [c.id for c in pool.all()]
    excluded = all_ids[:9]

    drawn = deck.draw(pool, WhiteCard, excluded, count=1)

    assert [c.id for c in drawn] == [all_ids[9]]


def test_draw_returns_distinct_cards(make_expansion, flask_app):
    expansion = make_expansion(picks=(1,), white=10)
    pool = WhiteCard.query.filter_by(expansion_id=expansion.id)

    drawn = deck.draw(pool, WhiteCard, [], count=10)

    assert len({c.id for c in drawn}) == 10


def test_draw_is_all_or_nothing_when_short(make_expansion, flask_app):
    expansion = make_expansion(picks=(1,), white=3)
    pool = WhiteCard.query.filter_by(expansion_id=expansion.id)

    with pytest.raises(DeckExhausted) as excinfo:
        deck.draw(pool, WhiteCard, [], count=4)

    assert excinfo.value.details['available'] == 3
    assert excinfo.value.details['requested'] == 4
    assert not excinfo.value.game_over


def test_draw_of_zero_cards_is_empty(make_expansion, flask_app):
    expansion = make_expansion(picks=(1,), white=0)
    pool = WhiteCard.query.filter_by(expansion_id=expansion.id)

    assert deck.draw(pool, WhiteCard, [], count=0) == []


def test_draw_reaches_every_card(make_expansion, flask_app):
    expansion = make_expansion(picks=(1,), white=4)
    pool = WhiteCard.query.filter_by(expansion_id=expansion.id)

    seen = set()
    for _ in range(200):
        seen.add(deck.draw(pool, WhiteCard, [], count=1)[0].id)

    assert seen == {c.id for c in pool.all()}


def test_pools_are_restricted_to_selected_expansions(make_game, make_expansion):
    other = make_expansion(picks=(1, 1), white=20)
    game_id, member_ids = make_game(players=1, picks=(1,), white=10)
    game = db.session.get(Game, game_id)
    player = db.session.get(Player, member_ids[0])

    selected_ids = {e.id for e in game.expansions}
    assert other.id not in selected_ids
    assert all(c.expansion_id in selected_ids for c in deck.white_card_pool(game).all())
    assert all(c.expansion_id in selected_ids for c in deck.black_card_pool(game).all())
    held = {e.white_card.expansion_id for e in HandEntry.query.filter_by(player_id=player.id)}
    assert held <= selected_ids


def test_black_card_exhaustion_is_game_over(make_game):
    from partycards.services.games import draw_black_card

    game_id, _ = make_game(players=1, picks=(1,))
    draw_black_card(game_id)
    game = db.session.get(Game, game_id)

    with pytest.raises(DeckExhausted) as excinfo:
        deck.draw_black_card(game)
    assert excinfo.value.game_over
