"""
Caller identity from the identity provider's JWT.

Claims are trusted as issued; the service never looks the caller up.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import jwt

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import AuthenticationError
from src.service.ticketing.domain.enum.user_role import UserRole
from src.service.ticketing.domain.value_object.caller_identity import CallerIdentity


class JwtAuth:
    def __init__(self) -> None:
        self.secret = settings.SECRET_KEY.get_secret_value()
        self.algorithm = settings.ALGORITHM
        self.token_expire_days = 7

    def create_jwt_token(self, caller: CallerIdentity) -> str:
        payload = {
            'sub': str(caller.user_id),
            'exp': datetime.now(timezone.utc) + timedelta(days=self.token_expire_days),
            'iat': datetime.now(timezone.utc),
            'user_id': caller.user_id,
            'email': caller.email,
            'role': str(caller.role),
            'venue_id': caller.venue_id,
            'is_active': caller.is_active,
        }

        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_jwt_token(self, token: str) -> Dict:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError as e:
            raise AuthenticationError('Invalid token') from e

    def get_caller_from_jwt(self, token: Optional[str]) -> CallerIdentity:
        if not token:
            raise AuthenticationError('Not authenticated')

        payload = self.decode_jwt_token(token)

        user_id = payload.get('user_id')
        role = payload.get('role')
        if not user_id or not role:
            raise AuthenticationError('Invalid token')

        try:
            caller_role = UserRole(role)
        except ValueError as e:
            raise AuthenticationError('Invalid token') from e

        # Rebuild identity from JWT payload (no DB query)
        return CallerIdentity(
            user_id=int(user_id),
            role=caller_role,
            email=payload.get('email') or '',
            venue_id=payload.get('venue_id'),
            is_active=payload.get('is_active', True),
        )
