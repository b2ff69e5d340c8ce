from enum import StrEnum


class UserRole(StrEnum):
    USER = 'user'
    SCANNER = 'scanner'
    VENUE_ADMIN = 'venueAdmin'
    SITE_ADMIN = 'siteAdmin'


# Higher level inherits every permission of the levels below it
ROLE_LEVEL: dict[UserRole, int] = {
    UserRole.USER: 0,
    UserRole.SCANNER: 1,
    UserRole.VENUE_ADMIN: 2,
    UserRole.SITE_ADMIN: 3,
}

# Roles whose access is bound to a single venue
VENUE_SCOPED_ROLES = frozenset({UserRole.SCANNER, UserRole.VENUE_ADMIN})
