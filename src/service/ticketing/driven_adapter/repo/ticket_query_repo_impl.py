from datetime import datetime
from typing import List

from uuid_utils import UUID

from src.platform.database.asyncpg_setting import acquire_connection
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.ticketing.driven_adapter.repo.ticket_row_mapper import (
    TICKET_COLUMNS,
    row_to_ticket,
)
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.enum.ticket_status import TicketStatus


class TicketQueryRepoImpl(ITicketQueryRepo):
    @Logger.io
    async def get_by_id(self, *, ticket_id: UUID) -> TicketEntity | None:
        async with acquire_connection() as conn:
            row = await conn.fetchrow(
                f'SELECT {TICKET_COLUMNS} FROM ticket WHERE id = $1',
                ticket_id,
            )
        return row_to_ticket(row) if row else None

    @Logger.io
    async def get_by_payment_reference(self, *, payment_reference: str) -> TicketEntity | None:
        async with acquire_connection() as conn:
            row = await conn.fetchrow(
                f'SELECT {TICKET_COLUMNS} FROM ticket WHERE payment_reference = $1',
                payment_reference,
            )
        return row_to_ticket(row) if row else None

    @Logger.io
    async def get_by_ticket_number(self, *, ticket_number: str) -> TicketEntity | None:
        async with acquire_connection() as conn:
            row = await conn.fetchrow(
                f'SELECT {TICKET_COLUMNS} FROM ticket WHERE ticket_number = $1',
                ticket_number,
            )
        return row_to_ticket(row) if row else None

    @Logger.io
    async def find_confirmed_for_owner(
        self, *, event_id: int, owner_user_id: int
    ) -> TicketEntity | None:
        async with acquire_connection() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT {TICKET_COLUMNS}
                FROM ticket
                WHERE event_id = $1 AND owner_user_id = $2 AND status = 'confirmed'
                """,
                event_id,
                owner_user_id,
            )
        return row_to_ticket(row) if row else None

    @Logger.io
    async def list_by_owner(
        self, *, owner_user_id: int, status: TicketStatus | None = None
    ) -> List[TicketEntity]:
        async with acquire_connection() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {TICKET_COLUMNS}
                FROM ticket
                WHERE owner_user_id = $1
                  AND ($2::text IS NULL OR status = $2)
                ORDER BY purchased_at DESC NULLS LAST, id DESC
                """,
                owner_user_id,
                status.value if status else None,
            )
        return [row_to_ticket(row) for row in rows]

    @Logger.io
    async def list_scanned_by(
        self,
        *,
        scanner_user_id: int,
        limit: int,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> List[TicketEntity]:
        async with acquire_connection() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {TICKET_COLUMNS}
                FROM ticket
                WHERE scanned_by = $1
                  AND used_at IS NOT NULL
                  AND ($2::timestamptz IS NULL OR used_at >= $2)
                  AND ($3::timestamptz IS NULL OR used_at < $3)
                ORDER BY used_at DESC
                LIMIT $4
                """,
                scanner_user_id,
                since,
                until,
                limit,
            )
        return [row_to_ticket(row) for row in rows]
