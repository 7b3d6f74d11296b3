"""Add willing box and weekly score tables

Revision ID: 001_willing_box_tables
Revises:
Create Date: 2026-10-16 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_willing_box_tables'
down_revision = None
branch_labels = None
depends_on = None

JSON_DOCUMENT = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql')


def upgrade():
    # Create willing_boxes table
    op.create_table(
        'willing_boxes',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('pairing_id', sa.String(), nullable=False),
        sa.Column('week_number', sa.Integer(), nullable=False),
        sa.Column('partner_a_id', sa.String(), nullable=False),
        sa.Column('partner_b_id', sa.String(), nullable=False),
        sa.Column('phase', sa.String(), nullable=False, server_default='planting_trees'),
        sa.Column('partner_a_wishes', JSON_DOCUMENT, nullable=False, server_default='[]'),
        sa.Column('partner_b_wishes', JSON_DOCUMENT, nullable=False, server_default='[]'),
        sa.Column('partner_a_selection', JSON_DOCUMENT, nullable=True),
        sa.Column('partner_b_selection', JSON_DOCUMENT, nullable=True),
        sa.Column('is_locked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('locked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('revealed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('revision', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_willing_boxes_pairing_id', 'willing_boxes', ['pairing_id'])
    op.create_index('ix_willing_boxes_partner_a_id', 'willing_boxes', ['partner_a_id'])
    op.create_index('ix_willing_boxes_partner_b_id', 'willing_boxes', ['partner_b_id'])
    op.create_index('ix_willing_boxes_phase', 'willing_boxes', ['phase'])
    op.create_index('idx_willing_boxes_pairing_week', 'willing_boxes', ['pairing_id', 'week_number'], unique=True)

    # Create weekly_scores table
    op.create_table(
        'weekly_scores',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('pairing_id', sa.String(), nullable=False),
        sa.Column('week_number', sa.Integer(), nullable=False),
        sa.Column('partner_a_id', sa.String(), nullable=False),
        sa.Column('partner_b_id', sa.String(), nullable=False),
        sa.Column('partner_a_guesses', JSON_DOCUMENT, nullable=False, server_default='[]'),
        sa.Column('partner_b_guesses', JSON_DOCUMENT, nullable=False, server_default='[]'),
        sa.Column('partner_a_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('partner_b_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_complete', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('revision', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('partner_a_score >= 0 AND partner_b_score >= 0', name='ck_weekly_scores_non_negative'),
    )
    op.create_index('ix_weekly_scores_pairing_id', 'weekly_scores', ['pairing_id'])
    op.create_index('idx_weekly_scores_pairing_week', 'weekly_scores', ['pairing_id', 'week_number'], unique=True)


def downgrade():
    op.drop_index('idx_weekly_scores_pairing_week', table_name='weekly_scores')
    op.drop_index('ix_weekly_scores_pairing_id', table_name='weekly_scores')
    op.drop_table('weekly_scores')
    op.drop_index('idx_willing_boxes_pairing_week', table_name='willing_boxes')
    op.drop_index('ix_willing_boxes_phase', table_name='willing_boxes')
    op.drop_index('ix_willing_boxes_partner_b_id', table_name='willing_boxes')
    op.drop_index('ix_willing_boxes_partner_a_id', table_name='willing_boxes')
    op.drop_index('ix_willing_boxes_pairing_id', table_name='willing_boxes')
    op.drop_table('willing_boxes')
