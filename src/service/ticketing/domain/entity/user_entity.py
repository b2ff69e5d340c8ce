from typing import Optional

import attrs

from src.service.ticketing.domain.enum.user_role import UserRole


def normalize_email(email: str) -> str:
    return email.strip().lower()


@attrs.define
class UserEntity:
    id: int
    email: str = attrs.field(converter=normalize_email)
    name: str = ''
    role: UserRole = UserRole.USER
    venue_id: Optional[int] = None
    is_active: bool = True
