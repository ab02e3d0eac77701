"""create_slot_swap_tables

Revision ID: 3a9f1c27e4b8
Revises:
Create Date: 2025-11-10 09:12:41.518204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3a9f1c27e4b8'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


slot_status = postgresql.ENUM('BUSY', 'SWAPPABLE', 'SWAP_PENDING', name='slot_status')
swap_status = postgresql.ENUM('PENDING', 'ACCEPTED', 'REJECTED', name='swap_status')


def upgrade() -> None:
    """
    Create users, slots and swap_requests.

    The partial unique indexes on swap_requests guarantee that a slot is
    referenced by at most one PENDING request.
    """
    bind = op.get_bind()
    slot_status.create(bind, checkfirst=True)
    swap_status.create(bind, checkfirst=True)

    op.create_table(
        'users',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('full_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'slots',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('owner_id', sa.UUID(), nullable=False),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_time', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('end_time', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column(
            'status',
            postgresql.ENUM(name='slot_status', create_type=False),
            server_default='BUSY',
            nullable=False,
        ),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.CheckConstraint('end_time > start_time', name='check_slot_time_range'),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_slots_owner_id', 'slots', ['owner_id'], unique=False)
    op.create_index('ix_slots_status', 'slots', ['status'], unique=False)
    op.create_index('idx_slots_owner_start', 'slots', ['owner_id', 'start_time'], unique=False)

    op.create_table(
        'swap_requests',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('requester_id', sa.UUID(), nullable=False),
        sa.Column('recipient_id', sa.UUID(), nullable=False),
        sa.Column('my_slot_id', sa.UUID(), nullable=True),
        sa.Column('their_slot_id', sa.UUID(), nullable=True),
        sa.Column(
            'status',
            postgresql.ENUM(name='swap_status', create_type=False),
            server_default='PENDING',
            nullable=False,
        ),
        sa.Column('version', sa.Integer(), server_default='1', nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.CheckConstraint('requester_id <> recipient_id', name='check_swap_distinct_principals'),
        sa.CheckConstraint('my_slot_id <> their_slot_id', name='check_swap_distinct_slots'),
        sa.ForeignKeyConstraint(['requester_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['recipient_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['my_slot_id'], ['slots.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['their_slot_id'], ['slots.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'idx_swap_requests_requester_created', 'swap_requests',
        ['requester_id', 'created_at'], unique=False,
    )
    op.create_index(
        'idx_swap_requests_recipient_status_created', 'swap_requests',
        ['recipient_id', 'status', 'created_at'], unique=False,
    )
    op.create_index(
        'uq_swap_requests_pending_my_slot', 'swap_requests', ['my_slot_id'],
        unique=True, postgresql_where=sa.text("status = 'PENDING'"),
    )
    op.create_index(
        'uq_swap_requests_pending_their_slot', 'swap_requests', ['their_slot_id'],
        unique=True, postgresql_where=sa.text("status = 'PENDING'"),
    )


def downgrade() -> None:
    op.drop_index('uq_swap_requests_pending_their_slot', table_name='swap_requests')
    op.drop_index('uq_swap_requests_pending_my_slot', table_name='swap_requests')
    op.drop_index('idx_swap_requests_recipient_status_created', table_name='swap_requests')
    op.drop_index('idx_swap_requests_requester_created', table_name='swap_requests')
    op.drop_table('swap_requests')

    op.drop_index('idx_slots_owner_start', table_name='slots')
    op.drop_index('ix_slots_status', table_name='slots')
    op.drop_index('ix_slots_owner_id', table_name='slots')
    op.drop_table('slots')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')

    bind = op.get_bind()
    swap_status.drop(bind, checkfirst=True)
    slot_status.drop(bind, checkfirst=True)
