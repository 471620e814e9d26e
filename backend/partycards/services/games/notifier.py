"""Domain events and their delivery over Socket.IO.

Events are queued on the unit of work while a game transaction runs and
handed to the notifier only after it commits. Delivery is best-effort:
a failed emit is logged and never reaches the caller.
"""
from flask import current_app


NAMESPACE = '/ws'


def game_room(game_code: str) -> str:
    return f"game:{game_code.upper()}"


def player_room(game_code: str, player_id: int) -> str:
    return f"game:{game_code.upper()}:player:{player_id}"


class GameEvent:
    name = 'game_event'

    def __init__(self, room, payload):
        self.room = room
        self.payload = payload

    def __repr__(self):
        return f"<{type(self).__name__} room={self.room}>"


class CardsDealt(GameEvent):
    name = 'cards_dealt'

    def __init__(self, game, player, entries):
        super().__init__(player_room(game.game_code, player.id), {
            'game_code': game.game_code,
            'player_id': player.id,
            'cards': [e.to_dict() for e in entries],
        })
        self.player_id = player.id
        self.hand_entry_ids = [e.id for e in entries]


class CardsSubmitted(GameEvent):
    name = 'cards_submitted'

    def __init__(self, game, player):
        super().__init__(game_room(game.game_code), {
            'game_code': game.game_code,
            'player_id': player.id,
            'round': game.round_number,
        })
        self.player_id = player.id


class JudgeRotated(GameEvent):
    name = 'judge_rotated'

    def __init__(self, game, new_judge, black_card):
        super().__init__(game_room(game.game_code), {
            'game_code': game.game_code,
            'judge_id': new_judge.id,
            'round': game.round_number,
            'black_card': black_card.to_dict() if black_card else None,
        })
        self.judge_id = new_judge.id
        self.black_card_id = black_card.id if black_card else None


class GameEnded(GameEvent):
    name = 'game_ended'

    def __init__(self, game, reason):
        super().__init__(game_room(game.game_code), {
            'game_code': game.game_code,
            'reason': reason,
        })


class SocketIONotifier:
    def __init__(self, socketio):
        self.socketio = socketio

    def publish(self, event: GameEvent) -> None:
        try:
            self.socketio.emit(event.name, event.payload, to=event.room, namespace=NAMESPACE)
        except Exception:
            current_app.logger.exception(f"[notify-failed] event={event.name} room={event.room}")


def get_notifier():
    return current_app.extensions['partycards.notifier']


def publish_all(events) -> None:
    notifier = get_notifier()
    for event in events:
        try:
            notifier.publish(event)
        except Exception:
            current_app.logger.exception(f"[notify-failed] event={event.name} room={event.room}")
