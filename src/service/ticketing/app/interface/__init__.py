"""Application layer interfaces (Ports)"""

from src.service.ticketing.app.interface.i_audit_sink import IAuditSink
from src.service.ticketing.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.ticketing.app.interface.i_inventory_ledger import (
    IInventoryLedger,
    ReservationOutcome,
)
from src.service.ticketing.app.interface.i_issuance_unit_of_work import IIssuanceUnitOfWork
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.app.interface.i_rate_limiter import IRateLimiter
from src.service.ticketing.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.ticketing.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.ticketing.app.interface.i_user_query_repo import IUserQueryRepo

__all__ = [
    'IAuditSink',
    'IEventQueryRepo',
    'IInventoryLedger',
    'IIssuanceUnitOfWork',
    'IPaymentGateway',
    'IRateLimiter',
    'ITicketCommandRepo',
    'ITicketQueryRepo',
    'IUserQueryRepo',
    'ReservationOutcome',
]
