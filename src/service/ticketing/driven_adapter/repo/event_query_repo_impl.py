import asyncpg

from src.platform.database.asyncpg_setting import acquire_connection
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.enum.event_status import EventStatus


class EventQueryRepoImpl(IEventQueryRepo):
    @staticmethod
    def _row_to_entity(row: asyncpg.Record) -> EventEntity:
        return EventEntity(
            id=row['id'],
            name=row['name'],
            venue_id=row['venue_id'],
            max_tickets=row['max_tickets'],
            tickets_sold=row['tickets_sold'],
            price=row['price'],
            currency=row['currency'],
            status=EventStatus(row['status']),
            venue_name=row['venue_name'],
            start_time=row['start_time'],
        )

    @Logger.io
    async def get_by_id(self, *, event_id: int) -> EventEntity | None:
        async with acquire_connection() as conn:
            row = await conn.fetchrow(
                """
                SELECT id, name, venue_id, venue_name, start_time,
                       max_tickets, tickets_sold, price, currency, status
                FROM event
                WHERE id = $1
                """,
                event_id,
            )
        return self._row_to_entity(row) if row else None
