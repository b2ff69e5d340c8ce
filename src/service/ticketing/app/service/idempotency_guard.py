from src.platform.exception.exceptions import ConflictError, TransientStoreError
from src.platform.logging.loguru_io import Logger
from src.platform.resilience.retry import retry_with_backoff
from src.service.ticketing.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity


class IdempotencyGuard:
    """
    One ticket per payment reference.

    The guarantee itself is the unique constraint on `ticket.payment_reference`;
    this guard only reads. `ensure_unique` short-circuits replays before any
    side effect, and `resolve_winner` answers a lost insert race with the
    ticket the winning call created.
    """

    def __init__(self, *, ticket_query_repo: ITicketQueryRepo) -> None:
        self.ticket_query_repo = ticket_query_repo

    @Logger.io
    async def ensure_unique(self, *, payment_reference: str) -> TicketEntity | None:
        return await retry_with_backoff(
            lambda: self.ticket_query_repo.get_by_payment_reference(
                payment_reference=payment_reference
            ),
            retry_on=(TransientStoreError,),
            operation_name='idempotency_lookup',
        )

    @Logger.io
    async def resolve_winner(self, *, payment_reference: str) -> TicketEntity:
        winner = await self.ensure_unique(payment_reference=payment_reference)
        if winner is None:
            # The unique violation is only raised once the other insert has committed
            raise ConflictError('Concurrent confirmation for this payment did not complete')
        Logger.base.info(
            f'🔁 [IDEMPOTENCY] Payment {payment_reference} already issued ticket {winner.id}'
        )
        return winner
