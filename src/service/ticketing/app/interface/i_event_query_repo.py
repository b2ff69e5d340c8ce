from abc import ABC, abstractmethod

from src.service.ticketing.domain.entity.event_entity import EventEntity


class IEventQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, event_id: int) -> EventEntity | None:
        pass
