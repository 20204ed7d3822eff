"""Create diet_logs table

Revision ID: 0001_create_diet_logs
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_create_diet_logs'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table('diet_logs',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('user_id', sa.Text(), nullable=False, comment='Free-form, not a foreign key'),
    sa.Column('food_name', sa.Text(), nullable=False),
    sa.Column('notes', sa.Text(), nullable=True),
    sa.Column('logged_at', sa.DateTime(), server_default=sa.text("TIMEZONE('utc', CURRENT_TIMESTAMP)"), nullable=False, comment='When the food was eaten'),
    sa.Column('created_at', sa.DateTime(), server_default=sa.text("TIMEZONE('utc', CURRENT_TIMESTAMP)"), nullable=False),
    sa.PrimaryKeyConstraint('id'),
    if_not_exists=True,
    )
    op.create_index('ix_diet_logs_user_id_logged_at', 'diet_logs', ['user_id', 'logged_at'], unique=False, if_not_exists=True)


def downgrade() -> None:
    op.drop_index('ix_diet_logs_user_id_logged_at', table_name='diet_logs')
    op.drop_table('diet_logs')
