from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_base import Base


class TicketModel(Base):
    __tablename__ = 'ticket'

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    event_id: Mapped[int] = mapped_column(Integer, ForeignKey('event.id'), nullable=False)
    owner_user_id: Mapped[int] = mapped_column(Integer, ForeignKey('user.id'), nullable=False)
    ticket_number: Mapped[str] = mapped_column(String(16), nullable=False)
    payment_reference: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default='confirmed', nullable=False)
    qr_code: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    purchased_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    used_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    scanned_by: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    scanned_by_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    refunded_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    transferred_from: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    transferred_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint('payment_reference', name='uq_ticket_payment_reference'),
        UniqueConstraint('ticket_number', name='uq_ticket_ticket_number'),
        # At most one confirmed ticket per holder per event
        Index(
            'uq_ticket_confirmed_owner_per_event',
            'event_id',
            'owner_user_id',
            unique=True,
            postgresql_where=text("status = 'confirmed'"),
        ),
        Index('ix_ticket_owner_user_id', 'owner_user_id'),
        Index('ix_ticket_scanned_by_used_at', 'scanned_by', 'used_at'),
    )
