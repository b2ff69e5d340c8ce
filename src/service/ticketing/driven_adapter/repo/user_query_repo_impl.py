from src.platform.database.asyncpg_setting import acquire_connection
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_user_query_repo import IUserQueryRepo
from src.service.ticketing.domain.entity.user_entity import UserEntity, normalize_email
from src.service.ticketing.domain.enum.user_role import UserRole


class UserQueryRepoImpl(IUserQueryRepo):
    @Logger.io
    async def get_by_email(self, *, email: str) -> UserEntity | None:
        async with acquire_connection() as conn:
            row = await conn.fetchrow(
                """
                SELECT id, email, name, role, venue_id, is_active
                FROM "user"
                WHERE email = $1
                """,
                normalize_email(email),
            )
        if not row:
            return None
        return UserEntity(
            id=row['id'],
            email=row['email'],
            name=row['name'],
            role=UserRole(row['role']),
            venue_id=row['venue_id'],
            is_active=row['is_active'],
        )
