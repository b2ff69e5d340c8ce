"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.ticketing.app.command import (
    confirm_purchase_use_case,
    create_payment_intent_use_case,
    redeem_ticket_use_case,
    transfer_ticket_use_case,
)
from src.service.ticketing.app.query import (
    get_scan_history_use_case,
    get_ticket_use_case,
    list_my_tickets_use_case,
)
from src.service.ticketing.driving_adapter.http_controller.auth import role_auth


WIRE_MODULES: list[ModuleType] = [
    confirm_purchase_use_case,
    create_payment_intent_use_case,
    redeem_ticket_use_case,
    transfer_ticket_use_case,
    get_ticket_use_case,
    list_my_tickets_use_case,
    get_scan_history_use_case,
    role_auth,
]
