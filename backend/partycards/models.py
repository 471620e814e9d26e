from partycards import db
from datetime import datetime, timezone


def utcnow():
    return datetime.now(timezone.utc)


game_expansions = db.Table(
    'game_expansions',
    db.Column('game_id', db.Integer, db.ForeignKey('game.id'), primary_key=True),
    db.Column('expansion_id', db.Integer, db.ForeignKey('expansion.id'), primary_key=True),
)


class Expansion(db.Model):
    __tablename__ = 'expansion'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), unique=True, nullable=False)
    black_cards = db.relationship('BlackCard', back_populates='expansion', lazy='dynamic')
    white_cards = db.relationship('WhiteCard', back_populates='expansion', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'black_card_count': self.black_cards.count(),
            'white_card_count': self.white_cards.count(),
        }


class BlackCard(db.Model):
    __tablename__ = 'black_card'
    __table_args__ = (
        db.CheckConstraint('pick >= 1 AND pick <= 3', name='ck_black_card_pick'),
    )
    id = db.Column(db.Integer, primary_key=True)
    text = db.Column(db.Text, nullable=False)
    pick = db.Column(db.Integer, nullable=False, default=1)
    expansion_id = db.Column(db.Integer, db.ForeignKey('expansion.id'), nullable=False, index=True)
    expansion = db.relationship('Expansion', back_populates='black_cards')

    def to_dict(self):
        return {
            'id': self.id,
            'text': self.text,
            'pick': self.pick,
            'expansion_id': self.expansion_id,
        }


class WhiteCard(db.Model):
    __tablename__ = 'white_card'
    id = db.Column(db.Integer, primary_key=True)
    text = db.Column(db.Text, nullable=False)
    expansion_id = db.Column(db.Integer, db.ForeignKey('expansion.id'), nullable=False, index=True)
    expansion = db.relationship('Expansion', back_populates='white_cards')

    def to_dict(self):
        return {
            'id': self.id,
            'text': self.text,
            'expansion_id': self.expansion_id,
        }


class Player(db.Model):
    __tablename__ = 'player'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False, index=True)
    score = db.Column(db.Integer, default=0, nullable=False)
    joined_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    game = db.relationship('Game', back_populates='players', foreign_keys=[game_id])

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'game_id': self.game_id,
            'score': self.score,
        }


class Game(db.Model):
    __tablename__ = 'game'

    HAND_LIMIT = 7

    AWAITING_BLACK_CARD = 'awaiting_black_card'
    ROUND_OPEN = 'round_open'
    ROUND_CLOSED = 'round_closed'
    ENDED = 'ended'

    id = db.Column(db.Integer, primary_key=True)
    # Only unique among games that have not ended
    game_code = db.Column(db.String(8), nullable=False, index=True)
    status = db.Column(db.String(32), default=AWAITING_BLACK_CARD, nullable=False)
    round_number = db.Column(db.Integer, default=0, nullable=False)
    judge_id = db.Column(db.Integer, db.ForeignKey('player.id', name='fk_game_judge_id', use_alter=True), nullable=True)
    current_black_card_id = db.Column(db.Integer, db.ForeignKey('black_card.id'), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    # Join order is id order
    players = db.relationship('Player', back_populates='game', foreign_keys='Player.game_id', order_by='Player.id')
    judge = db.relationship('Player', foreign_keys=[judge_id], post_update=True)
    current_black_card = db.relationship('BlackCard')
    expansions = db.relationship('Expansion', secondary=game_expansions, order_by='Expansion.id')
    drawn_black_cards = db.relationship('GameBlackCard', back_populates='game', lazy='dynamic',
                                        order_by='GameBlackCard.id')

    @property
    def is_active(self):
        return self.status != Game.ENDED

    def has_member(self, player_id):
        return any(p.id == player_id for p in self.players)


class GameBlackCard(db.Model):
    """Every black card drawn in a game, in draw order."""
    __tablename__ = 'game_black_card'
    __table_args__ = (
        db.UniqueConstraint('game_id', 'black_card_id', name='uq_game_black_card'),
    )
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False, index=True)
    black_card_id = db.Column(db.Integer, db.ForeignKey('black_card.id'), nullable=False)
    round_number = db.Column(db.Integer, nullable=False)
    drawn_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    discarded_at = db.Column(db.DateTime(timezone=True), nullable=True)
    game = db.relationship('Game', back_populates='drawn_black_cards')
    black_card = db.relationship('BlackCard')


class HandEntry(db.Model):
    """A white card dealt to a player in a game.

    Entries are never deleted. Once the round they were played in resolves
    they get ``deleted_at`` set and drop out of every ``live()`` query, but
    still count towards the player's already-drawn set.
    """
    __tablename__ = 'hand_entry'
    __table_args__ = (
        db.UniqueConstraint('game_id', 'player_id', 'white_card_id', name='uq_hand_entry_card'),
    )
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False, index=True)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False, index=True)
    white_card_id = db.Column(db.Integer, db.ForeignKey('white_card.id'), nullable=False)
    selected = db.Column(db.Boolean, default=False, nullable=False)
    order = db.Column(db.Integer, nullable=True)
    submitted_round = db.Column(db.Integer, nullable=True)
    drawn_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    deleted_at = db.Column(db.DateTime(timezone=True), nullable=True)

    player = db.relationship('Player')
    white_card = db.relationship('WhiteCard')

    @classmethod
    def live(cls):
        return cls.query.filter(cls.deleted_at.is_(None))

    @property
    def is_tombstoned(self):
        return self.deleted_at is not None

    def to_dict(self):
        return {
            'id': self.id,
            'white_card_id': self.white_card_id,
            'text': self.white_card.text,
            'selected': self.selected,
            'order': self.order,
        }
