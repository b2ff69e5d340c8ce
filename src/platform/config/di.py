"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.service.ticketing.app.service.compensation_manager import CompensationManager
from src.service.ticketing.app.service.idempotency_guard import IdempotencyGuard
from src.service.ticketing.driven_adapter.audit.loguru_audit_sink_impl import LoguruAuditSinkImpl
from src.service.ticketing.driven_adapter.payment.stripe_payment_gateway_impl import (
    StripePaymentGatewayImpl,
)
from src.service.ticketing.driven_adapter.repo.event_query_repo_impl import EventQueryRepoImpl
from src.service.ticketing.driven_adapter.repo.issuance_unit_of_work_impl import (
    IssuanceUnitOfWorkImpl,
)
from src.service.ticketing.driven_adapter.repo.ticket_command_repo_impl import (
    TicketCommandRepoImpl,
)
from src.service.ticketing.driven_adapter.repo.ticket_query_repo_impl import TicketQueryRepoImpl
from src.service.ticketing.driven_adapter.repo.user_query_repo_impl import UserQueryRepoImpl
from src.service.ticketing.driven_adapter.state.kvrocks_rate_limiter_impl import (
    KvrocksRateLimiterImpl,
)
from src.service.ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Repositories (stateless - borrow a pooled asyncpg connection per call)
    event_query_repo = providers.Singleton(EventQueryRepoImpl)
    ticket_query_repo = providers.Singleton(TicketQueryRepoImpl)
    ticket_command_repo = providers.Singleton(TicketCommandRepoImpl)
    user_query_repo = providers.Singleton(UserQueryRepoImpl)

    # One unit of work per issuance attempt
    issuance_unit_of_work = providers.Factory(IssuanceUnitOfWorkImpl)

    # External collaborators
    payment_gateway = providers.Singleton(StripePaymentGatewayImpl)
    rate_limiter = providers.Singleton(KvrocksRateLimiterImpl)
    audit_sink = providers.Singleton(LoguruAuditSinkImpl)

    # Auth service
    jwt_auth = providers.Singleton(JwtAuth)

    # Issuance helpers
    idempotency_guard = providers.Singleton(IdempotencyGuard, ticket_query_repo=ticket_query_repo)
    compensation_manager = providers.Singleton(
        CompensationManager, payment_gateway=payment_gateway, audit_sink=audit_sink
    )


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
