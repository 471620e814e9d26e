"""Game domain services: dealing, submissions and round rotation.

This package contains the game engine that HTTP routes and socket handlers
import, keeping transport concerns separated from core game mechanics.
Every mutating entry point runs under the game's lock in one transaction.
"""
from .session import create_game, join_game, draw_white_cards, find_game, game_view
from .rounds import draw_black_card, discard_black_card, rotate
from .submissions import submit_cards

__all__ = [
    'create_game',
    'join_game',
    'draw_white_cards',
    'find_game',
    'game_view',
    'draw_black_card',
    'discard_black_card',
    'rotate',
    'submit_cards',
]
