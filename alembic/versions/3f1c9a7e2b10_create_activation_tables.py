"""create_activation_tables

Revision ID: 3f1c9a7e2b10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7e2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

training_module_type = sa.Enum(
    'video', 'pdf', 'article', name='training_module_type_enum'
)


def upgrade() -> None:
    """Upgrade schema - Add doer activation tables."""

    op.create_table(
        'doers',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('auth_id', sa.String(), nullable=False),
        sa.Column('full_name', sa.String(length=200), nullable=True),
        sa.Column('email', sa.String(length=320), nullable=True),
        sa.Column('is_activated', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('activated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_doers_auth_id', 'doers', ['auth_id'], unique=True)

    op.create_table(
        'doer_activation',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('doer_id', sa.Uuid(), nullable=False),
        sa.Column('training_completed', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('training_completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('quiz_passed', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('quiz_passed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('quiz_attempt_id', sa.Uuid(), nullable=True),
        sa.Column('total_quiz_attempts', sa.Integer(), server_default='0', nullable=False),
        sa.Column('bank_details_added', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('bank_details_added_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_fully_activated', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('activated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['doer_id'], ['doers.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('doer_id'),
    )

    op.create_table(
        'training_modules',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('module_type', training_module_type, nullable=False),
        sa.Column('content_url', sa.String(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('order_index', sa.Integer(), server_default='0', nullable=False),
        sa.Column('is_required', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'training_progress',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('doer_id', sa.Uuid(), nullable=False),
        sa.Column('module_id', sa.Uuid(), nullable=False),
        sa.Column('is_completed', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('progress_percent', sa.Integer(), server_default='0', nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['doer_id'], ['doers.id']),
        sa.ForeignKeyConstraint(['module_id'], ['training_modules.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('doer_id', 'module_id', name='uq_training_progress_doer_module'),
    )
    op.create_index('ix_training_progress_doer_id', 'training_progress', ['doer_id'])

    op.create_table(
        'quiz_questions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('options', sa.JSON(), nullable=False),
        sa.Column('correct_option_index', sa.Integer(), nullable=False),
        sa.Column('explanation', sa.Text(), nullable=True),
        sa.Column('order_index', sa.Integer(), server_default='0', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'quiz_attempts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('doer_id', sa.Uuid(), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('total_questions', sa.Integer(), nullable=False),
        sa.Column('passed', sa.Boolean(), nullable=False),
        sa.Column('attempt_number', sa.Integer(), nullable=False),
        sa.Column('answers', sa.JSON(), nullable=False),
        sa.Column('attempted_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['doer_id'], ['doers.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('doer_id', 'attempt_number', name='uq_quiz_attempts_doer_attempt'),
    )
    op.create_index('ix_quiz_attempts_doer_id', 'quiz_attempts', ['doer_id'])
    op.create_index('ix_quiz_attempts_attempted_at', 'quiz_attempts', ['attempted_at'])

    op.create_table(
        'bank_details',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('doer_id', sa.Uuid(), nullable=False),
        sa.Column('account_holder_name', sa.String(length=200), nullable=False),
        sa.Column('account_number', sa.String(length=20), nullable=False),
        sa.Column('ifsc_code', sa.String(length=11), nullable=False),
        sa.Column('bank_name', sa.String(length=100), nullable=True),
        sa.Column('upi_id', sa.String(length=100), nullable=True),
        sa.Column('is_verified', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['doer_id'], ['doers.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_bank_details_doer_id', 'bank_details', ['doer_id'])


def downgrade() -> None:
    """Downgrade schema - Drop doer activation tables."""
    op.drop_index('ix_bank_details_doer_id', table_name='bank_details')
    op.drop_table('bank_details')
    op.drop_index('ix_quiz_attempts_attempted_at', table_name='quiz_attempts')
    op.drop_index('ix_quiz_attempts_doer_id', table_name='quiz_attempts')
    op.drop_table('quiz_attempts')
    op.drop_table('quiz_questions')
    op.drop_index('ix_training_progress_doer_id', table_name='training_progress')
    op.drop_table('training_progress')
    op.drop_table('training_modules')
    op.drop_table('doer_activation')
    op.drop_index('ix_doers_auth_id', table_name='doers')
    op.drop_table('doers')
    training_module_type.drop(op.get_bind(), checkfirst=True)
