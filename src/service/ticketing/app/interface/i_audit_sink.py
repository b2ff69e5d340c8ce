from abc import ABC, abstractmethod

from src.service.ticketing.domain.entity.audit_entry import AuditEntry


class IAuditSink(ABC):
    """Append-only record of issuance, redemption and transfer decisions"""

    @abstractmethod
    async def record(self, *, entry: AuditEntry) -> None:
        pass
