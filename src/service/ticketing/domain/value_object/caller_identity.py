from typing import Optional

import attrs

from src.service.ticketing.domain.enum.user_role import UserRole


@attrs.frozen
class CallerIdentity:
    """Verified claim set supplied by the identity provider; trusted as-is"""

    user_id: int
    role: UserRole
    email: str = ''
    venue_id: Optional[int] = None
    is_active: bool = True
