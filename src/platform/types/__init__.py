from src.platform.types.uuid7_utils_types import TicketId

__all__ = ['TicketId']
