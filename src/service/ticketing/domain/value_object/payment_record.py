from enum import StrEnum
from typing import Optional

import attrs


PAYMENT_SUCCEEDED = 'succeeded'


class RefundResult(StrEnum):
    REFUNDED = 'refunded'
    ALREADY_REFUNDED = 'already_refunded'


@attrs.frozen
class PaymentRecord:
    """Authoritative payment state as reported by the gateway at call time"""

    reference: str
    status: str
    amount: int
    currency: str
    event_id: Optional[int] = None
    user_id: Optional[int] = None
    amount_refunded: int = 0

    @property
    def is_succeeded(self) -> bool:
        return self.status == PAYMENT_SUCCEEDED

    @property
    def is_refunded(self) -> bool:
        return self.amount_refunded > 0


@attrs.frozen
class PaymentIntent:
    reference: str
    client_secret: str
    amount: int
    currency: str
