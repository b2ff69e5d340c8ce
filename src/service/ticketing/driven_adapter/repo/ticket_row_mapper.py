import asyncpg

from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.enum.ticket_status import TicketStatus


TICKET_COLUMNS = """
    id, event_id, owner_user_id, ticket_number, payment_reference, price, currency,
    status, qr_code, purchased_at, used_at, scanned_by, scanned_by_email,
    cancelled_at, refunded_at, transferred_from, transferred_at, created_at, updated_at
"""


def row_to_ticket(row: asyncpg.Record) -> TicketEntity:
    """Convert asyncpg Record to TicketEntity"""
    return TicketEntity(
        id=row['id'],
        event_id=row['event_id'],
        owner_user_id=row['owner_user_id'],
        ticket_number=row['ticket_number'],
        payment_reference=row['payment_reference'],
        price=row['price'],
        currency=row['currency'],
        status=TicketStatus(row['status']),
        qr_code=row['qr_code'],
        purchased_at=row['purchased_at'],
        used_at=row['used_at'],
        scanned_by=row['scanned_by'],
        scanned_by_email=row['scanned_by_email'],
        cancelled_at=row['cancelled_at'],
        refunded_at=row['refunded_at'],
        transferred_from=row['transferred_from'],
        transferred_at=row['transferred_at'],
        created_at=row['created_at'],
        updated_at=row['updated_at'],
    )
