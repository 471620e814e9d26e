"""initial card game schema

Revision ID: 1a7c3e9d2b40
Revises:
Create Date: 2026-10-18 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '1a7c3e9d2b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'expansion',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_table(
        'black_card',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('pick', sa.Integer(), nullable=False),
        sa.Column('expansion_id', sa.Integer(), nullable=False),
        sa.CheckConstraint('pick >= 1 AND pick <= 3', name='ck_black_card_pick'),
        sa.ForeignKeyConstraint(['expansion_id'], ['expansion.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_black_card_expansion_id', 'black_card', ['expansion_id'])
    op.create_table(
        'white_card',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('expansion_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['expansion_id'], ['expansion.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_white_card_expansion_id', 'white_card', ['expansion_id'])
    op.create_table(
        'game',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('game_code', sa.String(length=8), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('round_number', sa.Integer(), nullable=False),
        sa.Column('judge_id', sa.Integer(), nullable=True),
        sa.Column('current_black_card_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['current_black_card_id'], ['black_card.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_game_game_code', 'game', ['game_code'])
    op.create_table(
        'player',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('game_id', sa.Integer(), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['game_id'], ['game.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_player_game_id', 'player', ['game_id'])
    with op.batch_alter_table('game') as batch_op:
        batch_op.create_foreign_key('fk_game_judge_id', 'player', ['judge_id'], ['id'])
    op.create_table(
        'game_expansions',
        sa.Column('game_id', sa.Integer(), nullable=False),
        sa.Column('expansion_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['expansion_id'], ['expansion.id']),
        sa.ForeignKeyConstraint(['game_id'], ['game.id']),
        sa.PrimaryKeyConstraint('game_id', 'expansion_id'),
    )
    op.create_table(
        'game_black_card',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('game_id', sa.Integer(), nullable=False),
        sa.Column('black_card_id', sa.Integer(), nullable=False),
        sa.Column('round_number', sa.Integer(), nullable=False),
        sa.Column('drawn_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('discarded_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['black_card_id'], ['black_card.id']),
        sa.ForeignKeyConstraint(['game_id'], ['game.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('game_id', 'black_card_id', name='uq_game_black_card'),
    )
    op.create_index('ix_game_black_card_game_id', 'game_black_card', ['game_id'])
    op.create_table(
        'hand_entry',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('game_id', sa.Integer(), nullable=False),
        sa.Column('player_id', sa.Integer(), nullable=False),
        sa.Column('white_card_id', sa.Integer(), nullable=False),
        sa.Column('selected', sa.Boolean(), nullable=False),
        sa.Column('order', sa.Integer(), nullable=True),
        sa.Column('submitted_round', sa.Integer(), nullable=True),
        sa.Column('drawn_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['game_id'], ['game.id']),
        sa.ForeignKeyConstraint(['player_id'], ['player.id']),
        sa.ForeignKeyConstraint(['white_card_id'], ['white_card.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('game_id', 'player_id', 'white_card_id', name='uq_hand_entry_card'),
    )
    op.create_index('ix_hand_entry_game_id', 'hand_entry', ['game_id'])
    op.create_index('ix_hand_entry_player_id', 'hand_entry', ['player_id'])


def downgrade():
    op.drop_index('ix_hand_entry_player_id', table_name='hand_entry')
    op.drop_index('ix_hand_entry_game_id', table_name='hand_entry')
    op.drop_table('hand_entry')
    op.drop_index('ix_game_black_card_game_id', table_name='game_black_card')
    op.drop_table('game_black_card')
    op.drop_table('game_expansions')
    with op.batch_alter_table('game') as batch_op:
        batch_op.drop_constraint('fk_game_judge_id', type_='foreignkey')
    op.drop_index('ix_player_game_id', table_name='player')
    op.drop_table('player')
    op.drop_index('ix_game_game_code', table_name='game')
    op.drop_table('game')
    op.drop_index('ix_white_card_expansion_id', table_name='white_card')
    op.drop_table('white_card')
    op.drop_index('ix_black_card_expansion_id', table_name='black_card')
    op.drop_table('black_card')
    op.drop_table('expansion')
