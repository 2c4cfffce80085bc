"""create_import_tables

Revision ID: 5a1d0c3e9b27
Revises:
Create Date: 2026-10-19 09:00:00.000000

Users, the member/program/attendee directory, checkouts and donations, plus
import_history (with its rollback manifest) and audit_logs.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5a1d0c3e9b27'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=50), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'members',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('member_type', sa.String(length=50), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('grade', sa.String(length=20), nullable=True),
        sa.Column('school', sa.String(length=255), nullable=True),
        sa.Column('parent_id', sa.Uuid(), sa.ForeignKey('members.id'), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    # Unique index is the source of truth for member de-duplication
    op.create_index('ix_members_email', 'members', ['email'], unique=True)
    op.create_index('ix_members_parent_id', 'members', ['parent_id'])

    op.create_table(
        'programs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('template_type', sa.String(length=50), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('auto_sync_attendees', sa.Boolean(), nullable=False),
        sa.Column('require_parent', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_programs_name', 'programs', ['name'], unique=True)

    op.create_table(
        'attendees',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('program_id', sa.Uuid(), sa.ForeignKey('programs.id'), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('member_id', sa.Uuid(), sa.ForeignKey('members.id'), nullable=True),
        sa.Column('parent_member_id', sa.Uuid(), sa.ForeignKey('members.id'), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('grade', sa.String(length=20), nullable=True),
        sa.Column('school', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_attendees_program_id', 'attendees', ['program_id'])
    op.create_index('ix_attendees_member_id', 'attendees', ['member_id'])
    op.create_index('ix_attendees_parent_member_id', 'attendees', ['parent_member_id'])

    op.create_table(
        'checkouts',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('member_id', sa.Uuid(), sa.ForeignKey('members.id'), nullable=False),
        sa.Column('checkout_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('number_of_books', sa.Integer(), nullable=True),
        sa.Column('genres', sa.JSON(), server_default=sa.text("'[]'"), nullable=False),
        sa.Column('weight', sa.Float(), nullable=True),
        sa.Column('total_weight', sa.Float(), nullable=False),
        sa.Column('recorded_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_checkouts_member_id', 'checkouts', ['member_id'])
    op.create_index('ix_checkouts_checkout_date', 'checkouts', ['checkout_date'])

    op.create_table(
        'donations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('donation_type', sa.String(length=20), nullable=False),
        sa.Column('donor_type', sa.String(length=20), nullable=False),
        sa.Column('donor_name', sa.String(length=255), nullable=True),
        sa.Column('member_id', sa.Uuid(), sa.ForeignKey('members.id'), nullable=True),
        sa.Column('number_of_books', sa.Integer(), nullable=False),
        sa.Column('condition', sa.String(length=50), nullable=True),
        sa.Column('genres', sa.JSON(), server_default=sa.text("'[]'"), nullable=False),
        sa.Column('monetary_amount', sa.Float(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('donated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('recorded_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_donations_member_id', 'donations', ['member_id'])
    op.create_index('ix_donations_donated_at', 'donations', ['donated_at'])

    op.create_table(
        'import_history',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('import_type', sa.String(length=50), nullable=False),
        sa.Column('imported_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('source', sa.String(length=20), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=True),
        sa.Column('total_rows', sa.Integer(), nullable=False),
        sa.Column('successful', sa.Integer(), nullable=False),
        sa.Column('failed', sa.Integer(), nullable=False),
        sa.Column('skipped', sa.Integer(), nullable=False),
        sa.Column('errors', sa.JSON(), server_default=sa.text("'[]'"), nullable=False),
        sa.Column('imported_records', sa.JSON(), server_default=sa.text("'[]'"), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rolled_back_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
    )
    op.create_index('ix_import_history_started_at', 'import_history', ['started_at'])
    op.create_index('ix_import_history_imported_by_started_at', 'import_history', ['imported_by', 'started_at'])
    op.create_index('ix_import_history_type_status', 'import_history', ['import_type', 'status'])

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('actor_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('actor_email', sa.String(length=255), nullable=True),
        sa.Column('action', sa.String(length=100), nullable=False),
        sa.Column('entity_type', sa.String(length=100), nullable=False),
        sa.Column('entity_id', sa.Uuid(), nullable=True),
        sa.Column('before_state', sa.Text(), nullable=True),
        sa.Column('after_state', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])
    op.create_index('ix_audit_logs_entity_type', 'audit_logs', ['entity_type'])
    op.create_index('ix_audit_logs_entity_id', 'audit_logs', ['entity_id'])


def downgrade() -> None:
    op.drop_table('audit_logs')
    op.drop_table('import_history')
    op.drop_table('donations')
    op.drop_table('checkouts')
    op.drop_table('attendees')
    op.drop_table('programs')
    op.drop_table('members')
    op.drop_table('users')
