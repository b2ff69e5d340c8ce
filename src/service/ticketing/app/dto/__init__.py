"""Application layer DTOs"""

from src.service.ticketing.app.dto.issued_ticket import IssuedTicket

__all__ = ['IssuedTicket']
