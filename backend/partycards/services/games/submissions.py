from flask import current_app

from partycards.errors import ValidationError, NotFound, Forbidden, AlreadySubmitted, RoundClosed
from partycards.models import Game, HandEntry, Player
from .locking import game_transaction
from .notifier import CardsSubmitted


def submitted_entries(game, player=None):
    """Live entries played in the game's current round, in submission order."""
    query = HandEntry.live().filter_by(game_id=game.id, selected=True, submitted_round=game.round_number)
    if player is not None:
        query = query.filter_by(player_id=player.id)
    return query.order_by(HandEntry.player_id, HandEntry.order)


def has_submitted(game, player) -> bool:
    return submitted_entries(game, player).first() is not None


def submit_cards(game_id, player_id, hand_entry_ids, declared_amount, expected_round=None):
    """Play cards from a player's hand into the open round.

    ``hand_entry_ids`` order is kept: the first id gets ``order=1``.
    ``expected_round`` is the round the client is answering; if a rotation
    committed in the meantime the submission fails with RoundClosed.
    """
    with game_transaction(game_id) as uow:
        game = uow.game
        player = Player.query.filter_by(id=player_id, game_id=game.id).first()
        if player is None:
            raise Forbidden(f'Player {player_id} is not a member of this game')
        if game.status != Game.ROUND_OPEN or game.current_black_card is None:
            raise RoundClosed('No round is open for submissions', status=game.status)
        if expected_round is not None and int(expected_round) != game.round_number:
            raise RoundClosed(
                f'Round {expected_round} is closed',
                expected_round=int(expected_round),
                current_round=game.round_number,
            )
        if game.judge_id == player.id:
            raise Forbidden('The judge does not submit cards')

        pick = game.current_black_card.pick
        if declared_amount != pick:
            raise ValidationError(
                f'Declared amount must match the black card pick of {pick}',
                expected=pick,
                actual=declared_amount,
            )
        if len(hand_entry_ids) != declared_amount:
            raise ValidationError(
                f'Expected {declared_amount} card(s), got {len(hand_entry_ids)}',
                expected=declared_amount,
                actual=len(hand_entry_ids),
            )
        if len(set(hand_entry_ids)) != len(hand_entry_ids):
            raise ValidationError('The same card was submitted more than once')
        if has_submitted(game, player):
            raise AlreadySubmitted(f'Player {player.id} already submitted for round {game.round_number}')

        entries = HandEntry.query.filter(
            HandEntry.id.in_(hand_entry_ids),
            HandEntry.game_id == game.id,
            HandEntry.player_id == player.id,
        ).all()
        by_id = {e.id: e for e in entries}
        missing = [i for i in hand_entry_ids if i not in by_id]
        if missing:
            raise NotFound('Card(s) not in your hand', hand_entry_ids=missing)
        tombstoned = [e for e in entries if e.is_tombstoned]
        if any(e.submitted_round == game.round_number - 1 for e in tombstoned):
            # Played in the round the last rotation closed
            raise RoundClosed('Card(s) belong to a round that has closed', current_round=game.round_number)
        if tombstoned:
            raise NotFound('Card(s) not in your hand', hand_entry_ids=[i for i in hand_entry_ids if by_id[i].is_tombstoned])
        if any(e.selected for e in entries):
            raise AlreadySubmitted('Card(s) already played this round')

        for position, entry_id in enumerate(hand_entry_ids, start=1):
            entry = by_id[entry_id]
            entry.selected = True
            entry.order = position
            entry.submitted_round = game.round_number

        uow.emit(CardsSubmitted(game, player))
        current_app.logger.info(
            f"[submit] game={game.id} round={game.round_number} player={player.id} entries={list(hand_entry_ids)}"
        )
