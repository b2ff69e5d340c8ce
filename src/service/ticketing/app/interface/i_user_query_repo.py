from abc import ABC, abstractmethod

from src.service.ticketing.domain.entity.user_entity import UserEntity


class IUserQueryRepo(ABC):
    @abstractmethod
    async def get_by_email(self, *, email: str) -> UserEntity | None:
        """Lookup by normalised (trimmed, lower-cased) email"""
        pass
