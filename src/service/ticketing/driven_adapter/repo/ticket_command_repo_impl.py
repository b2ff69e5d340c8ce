"""
Ticket Command Repository Implementation

Status and ownership changes are single conditional UPDATE ... RETURNING
statements; an empty result means the guard no longer held.
"""

import asyncpg
from uuid_utils import UUID

from src.platform.config.core_setting import settings
from src.platform.database.asyncpg_setting import acquire_connection
from src.platform.database.store_errors import constraint_name_of
from src.platform.exception.exceptions import (
    AlreadyHoldsTicketError,
    ConflictError,
    DuplicateRequestError,
)
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.ticketing.driven_adapter.repo.ticket_row_mapper import (
    TICKET_COLUMNS,
    row_to_ticket,
)
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity


PAYMENT_REFERENCE_CONSTRAINT = 'uq_ticket_payment_reference'
CONFIRMED_OWNER_CONSTRAINT = 'uq_ticket_confirmed_owner_per_event'
TICKET_NUMBER_CONSTRAINT = 'uq_ticket_ticket_number'

MAX_TICKET_NUMBER_ATTEMPTS = 3


class TicketCommandRepoImpl(ITicketCommandRepo):
    def __init__(self, *, conn: asyncpg.Connection | None = None) -> None:
        # Bound by the unit of work; standalone use borrows from the pool per call
        self._conn = conn

    @Logger.io
    async def insert(self, *, ticket: TicketEntity) -> TicketEntity:
        async with acquire_connection(self._conn) as conn:
            for attempt in range(1, MAX_TICKET_NUMBER_ATTEMPTS + 1):
                try:
                    # Savepoint when nested, so a retry does not abort the outer transaction
                    async with conn.transaction():
                        row = await conn.fetchrow(
                            f"""
                            INSERT INTO ticket (
                                id, event_id, owner_user_id, ticket_number, payment_reference,
                                price, currency, status, qr_code, purchased_at
                            )
                            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
                            RETURNING {TICKET_COLUMNS}
                            """,
                            ticket.id,
                            ticket.event_id,
                            ticket.owner_user_id,
                            ticket.ticket_number,
                            ticket.payment_reference,
                            ticket.price,
                            ticket.currency,
                            ticket.status.value,
                            ticket.qr_code,
                            ticket.purchased_at,
                        )
                    return row_to_ticket(row)
                except asyncpg.UniqueViolationError as e:
                    constraint = constraint_name_of(e)
                    if constraint == PAYMENT_REFERENCE_CONSTRAINT:
                        raise DuplicateRequestError(
                            'Ticket already issued for this payment',
                            payment_reference=ticket.payment_reference,
                        ) from e
                    if constraint == CONFIRMED_OWNER_CONSTRAINT:
                        raise AlreadyHoldsTicketError(
                            'You already hold a ticket for this event'
                        ) from e
                    if constraint != TICKET_NUMBER_CONSTRAINT:
                        raise

                    Logger.base.warning(
                        f'🎲 [TICKET_NUMBER] Collision on {ticket.ticket_number} '
                        f'(attempt {attempt}/{MAX_TICKET_NUMBER_ATTEMPTS})'
                    )
                    ticket = ticket.with_new_ticket_number(
                        qr_secret=settings.QR_SECRET.get_secret_value()
                    )

        raise ConflictError('Could not allocate a unique ticket number')

    @Logger.io
    async def mark_used(
        self, *, ticket_id: UUID, scanned_by: int, scanned_by_email: str
    ) -> TicketEntity | None:
        async with acquire_connection(self._conn) as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE ticket
                SET status = 'used',
                    used_at = now(),
                    scanned_by = $2,
                    scanned_by_email = $3,
                    updated_at = now()
                WHERE id = $1 AND status = 'confirmed'
                RETURNING {TICKET_COLUMNS}
                """,
                ticket_id,
                scanned_by,
                scanned_by_email,
            )
        return row_to_ticket(row) if row else None

    @Logger.io
    async def reassign_owner(
        self, *, ticket_id: UUID, from_user_id: int, to_user_id: int
    ) -> TicketEntity | None:
        async with acquire_connection(self._conn) as conn:
            try:
                row = await conn.fetchrow(
                    f"""
                    UPDATE ticket
                    SET owner_user_id = $3,
                        transferred_from = $2,
                        transferred_at = now(),
                        updated_at = now()
                    WHERE id = $1 AND owner_user_id = $2 AND status = 'confirmed'
                    RETURNING {TICKET_COLUMNS}
                    """,
                    ticket_id,
                    from_user_id,
                    to_user_id,
                )
            except asyncpg.UniqueViolationError as e:
                if constraint_name_of(e) == CONFIRMED_OWNER_CONSTRAINT:
                    raise AlreadyHoldsTicketError(
                        'Recipient already holds a ticket for this event'
                    ) from e
                raise
        return row_to_ticket(row) if row else None
