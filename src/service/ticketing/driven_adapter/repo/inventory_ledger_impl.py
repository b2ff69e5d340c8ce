import asyncpg

from src.platform.database.asyncpg_setting import acquire_connection
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_inventory_ledger import (
    IInventoryLedger,
    ReservationOutcome,
)
from src.service.ticketing.domain.enum.event_status import EventStatus


class InventoryLedgerImpl(IInventoryLedger):
    def __init__(self, *, conn: asyncpg.Connection | None = None) -> None:
        self._conn = conn

    @Logger.io
    async def try_reserve(self, *, event_id: int) -> ReservationOutcome:
        async with acquire_connection(self._conn) as conn:
            # The row lock taken here serialises concurrent reservations for the event
            row = await conn.fetchrow(
                """
                UPDATE event
                SET tickets_sold = tickets_sold + 1,
                    status = CASE
                        WHEN tickets_sold + 1 >= max_tickets THEN 'sold_out'
                        ELSE status
                    END,
                    updated_at = now()
                WHERE id = $1 AND status = 'active' AND tickets_sold < max_tickets
                RETURNING tickets_sold, max_tickets
                """,
                event_id,
            )
            if row:
                Logger.base.info(
                    f'🎟️  [LEDGER] Event {event_id}: {row["tickets_sold"]}/{row["max_tickets"]} sold'
                )
                return ReservationOutcome.RESERVED

            current = await conn.fetchrow(
                'SELECT status, tickets_sold, max_tickets FROM event WHERE id = $1',
                event_id,
            )

        if current is None:
            return ReservationOutcome.EVENT_NOT_FOUND
        if current['status'] == EventStatus.CANCELLED:
            return ReservationOutcome.EVENT_NOT_ACTIVE
        return ReservationOutcome.CAPACITY_EXCEEDED
