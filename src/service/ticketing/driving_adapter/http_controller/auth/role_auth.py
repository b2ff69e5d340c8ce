from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Cookie, Depends, Header
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import AuthorizationError
from src.service.ticketing.domain.value_object.caller_identity import CallerIdentity
from src.service.ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.lower().startswith('bearer '):
        return authorization[7:].strip() or None
    return None


@inject
async def get_current_caller(
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
    token: Optional[str] = Cookie(None, alias=settings.AUTH_COOKIE_NAME),
    authorization: Optional[str] = Header(None),
) -> CallerIdentity:
    """
    Cookie first, then `Authorization: Bearer` for scanning devices.

    Role and venue checks for scanning happen in the redemption gate, which
    reports them as a result rather than an HTTP error.
    """
    return jwt_auth.get_caller_from_jwt(token or _bearer_token(authorization))


async def require_active_user(
    caller: CallerIdentity = Depends(get_current_caller),
) -> CallerIdentity:
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span(
        'auth.require_active_user',
        attributes={'user.id': caller.user_id, 'user.role': str(caller.role)},
    ):
        if not caller.is_active:
            raise AuthorizationError('User is inactive')
        return caller
