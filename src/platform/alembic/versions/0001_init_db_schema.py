"""init_db_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Schema:
- user: Account holders, scanners and venue staff (venue_id binds venue-scoped roles)
- event: Events with capacity ledger (tickets_sold <= max_tickets)
- ticket: Issued tickets, one per payment reference
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables with final schema."""

    # User table
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='user'),
        sa.Column('venue_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_user_email'), 'user', ['email'], unique=True)

    # Event table with capacity ledger
    op.create_table(
        'event',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('venue_id', sa.Integer(), nullable=False),
        sa.Column('venue_name', sa.String(length=255), nullable=True),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('max_tickets', sa.Integer(), nullable=False),
        sa.Column('tickets_sold', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='gbp'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.CheckConstraint(
            'tickets_sold >= 0 AND tickets_sold <= max_tickets', name='ck_event_tickets_sold'
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_event_venue_id'), 'event', ['venue_id'], unique=False)

    # Ticket table
    op.create_table(
        'ticket',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('owner_user_id', sa.Integer(), nullable=False),
        sa.Column('ticket_number', sa.String(length=16), nullable=False),
        sa.Column('payment_reference', sa.String(length=255), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='confirmed'),
        sa.Column('qr_code', sa.Text(), nullable=True),
        sa.Column('purchased_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('scanned_by', sa.Integer(), nullable=True),
        sa.Column('scanned_by_email', sa.String(length=255), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('refunded_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('transferred_from', sa.Integer(), nullable=True),
        sa.Column('transferred_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(['event_id'], ['event.id']),
        sa.ForeignKeyConstraint(['owner_user_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('payment_reference', name='uq_ticket_payment_reference'),
        sa.UniqueConstraint('ticket_number', name='uq_ticket_ticket_number'),
    )
    op.create_index(
        'uq_ticket_confirmed_owner_per_event',
        'ticket',
        ['event_id', 'owner_user_id'],
        unique=True,
        postgresql_where=sa.text("status = 'confirmed'"),
    )
    op.create_index('ix_ticket_owner_user_id', 'ticket', ['owner_user_id'], unique=False)
    op.create_index(
        'ix_ticket_scanned_by_used_at', 'ticket', ['scanned_by', 'used_at'], unique=False
    )


def downgrade() -> None:
    op.drop_index('ix_ticket_scanned_by_used_at', table_name='ticket')
    op.drop_index('ix_ticket_owner_user_id', table_name='ticket')
    op.drop_index('uq_ticket_confirmed_owner_per_event', table_name='ticket')
    op.drop_table('ticket')
    op.drop_index(op.f('ix_event_venue_id'), table_name='event')
    op.drop_table('event')
    op.drop_index(op.f('ix_user_email'), table_name='user')
    op.drop_table('user')
