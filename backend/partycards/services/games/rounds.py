"""Round lifecycle.

    awaiting_black_card --draw--> round_open --rotate--> round_closed --> round_open
            ^                         |                                  (new judge)
            +--------discard----------+
    any draw that finds the black deck empty --> ended

``round_closed`` only exists inside the rotation transaction; outside it a
game is always awaiting a card, open, or ended.
"""
from flask import current_app

from partycards import db
from partycards.errors import Conflict, DeckExhausted, Forbidden, ValidationError
from partycards.models import Game, GameBlackCard, HandEntry, Player, utcnow
from . import deck, hand
from .locking import game_transaction
from .notifier import CardsDealt, GameEnded, JudgeRotated
from .submissions import submitted_entries


def next_judge(game):
    """Member right after the current judge in join order, wrapping around.

    Recomputed from the member list each time so players joining mid-game
    slot in without renumbering anyone.
    """
    members = sorted(game.players, key=lambda p: p.id)
    if not members:
        return None
    if game.judge_id is None:
        return members[0]
    for member in members:
        if member.id > game.judge_id:
            return member
    return members[0]


def _require_status(game, *allowed):
    if game.status not in allowed:
        raise Conflict(
            f'Game is {game.status}, expected {" or ".join(allowed)}',
            status=game.status,
        )


def _open_round(game):
    card = deck.draw_black_card(game)
    game.round_number += 1
    game.current_black_card = card
    game.status = Game.ROUND_OPEN
    db.session.add(GameBlackCard(game_id=game.id, black_card_id=card.id, round_number=game.round_number))
    return card


def _discard_current(game):
    if game.current_black_card_id is not None:
        drawn = game.drawn_black_cards.filter_by(black_card_id=game.current_black_card_id).first()
        if drawn is not None:
            drawn.discarded_at = utcnow()
    game.current_black_card = None
    game.status = Game.AWAITING_BLACK_CARD


def _end_game(game_id, reason):
    with game_transaction(game_id) as uow:
        game = uow.game
        game.status = Game.ENDED
        game.current_black_card = None
        uow.emit(GameEnded(game, reason))
        current_app.logger.info(f"[finish] game={game.id} ended at round={game.round_number} reason={reason}")


def draw_black_card(game_id):
    """Start a round: deal a prompt nobody in this game has seen yet."""
    try:
        with game_transaction(game_id) as uow:
            game = uow.game
            _require_status(game, Game.AWAITING_BLACK_CARD)
            card = _open_round(game)
            current_app.logger.info(f"[black-card] game={game.id} round={game.round_number} card={card.id} pick={card.pick}")
            return card
    except DeckExhausted as exc:
        if exc.game_over:
            _end_game(game_id, 'black_deck_exhausted')
        raise


def discard_black_card(game_id):
    """Drop the current prompt without rotating. Cards already played go back to their hands."""
    with game_transaction(game_id) as uow:
        game = uow.game
        _require_status(game, Game.ROUND_OPEN)
        for entry in submitted_entries(game).all():
            entry.selected = False
            entry.order = None
            entry.submitted_round = None
        discarded = game.current_black_card_id
        _discard_current(game)
        current_app.logger.info(f"[discard] game={game.id} round={game.round_number} card={discarded}")
        return game


def rotate(game_id, requesting_player_id, winner_id=None):
    """Close the open round and deal the next one, all in one transaction.

    Any failure leaves the game exactly as it was, except that an empty black
    deck ends the game.
    """
    try:
        with game_transaction(game_id) as uow:
            game = uow.game
            if not game.has_member(requesting_player_id):
                raise Forbidden(f'Player {requesting_player_id} is not a member of this game')
            _require_status(game, Game.ROUND_OPEN)
            game.status = Game.ROUND_CLOSED
            previous_judge_id = game.judge_id
            closing_round = game.round_number

            played = submitted_entries(game).all()
            if winner_id is not None:
                if not any(e.player_id == winner_id for e in played):
                    raise ValidationError(
                        f'Player {winner_id} did not submit cards this round',
                        winner_id=winner_id,
                    )
                winner = Player.query.filter_by(id=winner_id, game_id=game.id).first()
                winner.score += 1

            new_judge = next_judge(game)

            now = utcnow()
            for entry in HandEntry.live().filter_by(game_id=game.id, selected=True).all():
                entry.deleted_at = now

            dealt = {}
            for player in game.players:
                dealt[player.id] = hand.top_up(game, player)

            _discard_current(game)
            card = _open_round(game)
            game.judge = new_judge

            for player in game.players:
                uow.emit(CardsDealt(game, player, hand.live_hand(game, player).all()))
            uow.emit(JudgeRotated(game, new_judge, card))
            current_app.logger.info(
                f"[rotate] game={game.id} round {closing_round} -> {game.round_number} "
                f"judge {previous_judge_id} -> {new_judge.id} played={len(played)} winner={winner_id} "
                f"dealt={sum(len(v) for v in dealt.values())}"
            )
            return game
    except DeckExhausted as exc:
        if exc.game_over:
            _end_game(game_id, 'black_deck_exhausted')
        raise
