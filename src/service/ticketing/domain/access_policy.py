"""
Venue-scoped role authorization as a pure function.

    evaluate(subject, action, resource) -> PolicyDecision

No store access; the caller supplies the resource's venue.
"""

from enum import StrEnum
from typing import Optional

import attrs

from src.service.ticketing.domain.enum.user_role import ROLE_LEVEL, VENUE_SCOPED_ROLES, UserRole
from src.service.ticketing.domain.value_object.caller_identity import CallerIdentity


class PolicyAction(StrEnum):
    REDEEM_TICKET = 'redeem_ticket'
    VIEW_SCAN_HISTORY = 'view_scan_history'


# Minimum role level per action
_REQUIRED_ROLE: dict[PolicyAction, UserRole] = {
    PolicyAction.REDEEM_TICKET: UserRole.SCANNER,
    PolicyAction.VIEW_SCAN_HISTORY: UserRole.SCANNER,
}

# Actions whose resource belongs to a venue
_VENUE_SCOPED_ACTIONS = frozenset({PolicyAction.REDEEM_TICKET})


@attrs.frozen
class PolicyResource:
    venue_id: Optional[int] = None


@attrs.frozen
class PolicyDecision:
    allowed: bool
    reason: str

    @classmethod
    def allow(cls) -> 'PolicyDecision':
        return cls(allowed=True, reason='allowed')

    @classmethod
    def deny(cls, reason: str) -> 'PolicyDecision':
        return cls(allowed=False, reason=reason)


def evaluate(
    subject: CallerIdentity, action: PolicyAction, resource: PolicyResource
) -> PolicyDecision:
    if not subject.is_active:
        return PolicyDecision.deny('Account is inactive')

    required = _REQUIRED_ROLE[action]
    if ROLE_LEVEL.get(subject.role, 0) < ROLE_LEVEL[required]:
        return PolicyDecision.deny(f'Role {subject.role} cannot {action}')

    if action not in _VENUE_SCOPED_ACTIONS or subject.role not in VENUE_SCOPED_ROLES:
        return PolicyDecision.allow()

    # A venue-scoped role without a bound venue has no venue to act on
    if subject.venue_id is None:
        return PolicyDecision.deny(f'Role {subject.role} is not bound to a venue')

    if resource.venue_id != subject.venue_id:
        return PolicyDecision.deny('You do not have permission to access this venue')

    return PolicyDecision.allow()
