from datetime import datetime
from typing import Optional

import attrs

from src.service.ticketing.domain.enum.event_status import EventStatus


@attrs.define
class EventEntity:
    id: int
    name: str
    venue_id: int
    max_tickets: int
    tickets_sold: int
    price: int  # minor currency units
    currency: str
    status: EventStatus = EventStatus.ACTIVE
    venue_name: Optional[str] = None
    start_time: Optional[datetime] = None

    @property
    def remaining(self) -> int:
        return max(self.max_tickets - self.tickets_sold, 0)

    @property
    def is_on_sale(self) -> bool:
        return self.status == EventStatus.ACTIVE and self.remaining > 0
