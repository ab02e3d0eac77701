"""
SQLAlchemy ORM models for the slot-swap tables.

This module defines the tables:
- users: Principals that own calendar slots
- slots: Calendar time ranges with a tri-state availability flag
- swap_requests: Swap ledger, one row per proposal and its lifecycle

All models use:
- UUID primary keys (auto-generated)
- TIMESTAMP WITH TIME ZONE for datetime fields
- Proper indexes and constraints
"""

from datetime import UTC, datetime
from enum import Enum as PyEnum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    TIMESTAMP,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import ENUM as PG_ENUM
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    return datetime.now(UTC)


# ============================================================================
# Base Class
# ============================================================================


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


# ============================================================================
# Enums
# ============================================================================


class SlotStatus(str, PyEnum):
    """Availability of a calendar slot."""

    BUSY = "BUSY"
    SWAPPABLE = "SWAPPABLE"
    SWAP_PENDING = "SWAP_PENDING"  # Referenced by exactly one PENDING swap request

    def __str__(self):
        return self.value


class SwapStatus(str, PyEnum):
    """Swap request lifecycle status. ACCEPTED and REJECTED are terminal."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"

    def __str__(self):
        return self.value


# ============================================================================
# Core Models
# ============================================================================


class User(Base):
    """
    User model - Principals that own slots and trade them.

    Credentials are verified by the identity provider; this table only
    carries what the swap views display.
    """

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True), primary_key=True, default=uuid4
    )

    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, nullable=False
    )

    slots: Mapped[list["Slot"]] = relationship("Slot", back_populates="owner")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"


class Slot(Base):
    """
    Slot model - A calendar time range owned by a principal.

    The calendar subsystem creates and edits slots. The swap engine only
    moves `status` and, on an accepted swap, `owner_id`.
    """

    __tablename__ = "slots"

    id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True), primary_key=True, default=uuid4
    )

    owner_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_time: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False
    )
    end_time: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False
    )

    # Note: values_callable keeps the stored value ("SWAP_PENDING") aligned
    # with the migration's enum labels
    status: Mapped[SlotStatus] = mapped_column(
        PG_ENUM(
            SlotStatus,
            name="slot_status",
            create_type=False,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=SlotStatus.BUSY,
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    owner: Mapped["User"] = relationship("User", back_populates="slots")

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="check_slot_time_range"),
        # Calendar listing and overlap checks per owner
        Index("idx_slots_owner_start", "owner_id", "start_time"),
    )

    def __repr__(self) -> str:
        return f"<Slot(id={self.id}, owner_id={self.owner_id}, status='{self.status.value}')>"


# ============================================================================
# Transactional Models
# ============================================================================


class SwapRequest(Base):
    """
    SwapRequest model - Swap ledger entry.

    While PENDING, both referenced slots are SWAP_PENDING and this row is
    the only authority that may move them out of that state. `version` is
    bumped on every resolution and compared on write.
    """

    __tablename__ = "swap_requests"

    id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True), primary_key=True, default=uuid4
    )

    requester_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    recipient_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    # SET NULL keeps the ledger history readable after a slot is deleted
    my_slot_id: Mapped[UUID | None] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("slots.id", ondelete="SET NULL"),
        nullable=True,
    )
    their_slot_id: Mapped[UUID | None] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("slots.id", ondelete="SET NULL"),
        nullable=True,
    )

    status: Mapped[SwapStatus] = mapped_column(
        PG_ENUM(
            SwapStatus,
            name="swap_status",
            create_type=False,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=SwapStatus.PENDING,
        nullable=False,
    )
    version: Mapped[int] = mapped_column(
        Integer, default=1, server_default="1", nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    requester: Mapped["User"] = relationship("User", foreign_keys=[requester_id])
    recipient: Mapped["User"] = relationship("User", foreign_keys=[recipient_id])
    my_slot: Mapped[Optional["Slot"]] = relationship("Slot", foreign_keys=[my_slot_id])
    their_slot: Mapped[Optional["Slot"]] = relationship("Slot", foreign_keys=[their_slot_id])

    __table_args__ = (
        CheckConstraint("requester_id <> recipient_id", name="check_swap_distinct_principals"),
        CheckConstraint("my_slot_id <> their_slot_id", name="check_swap_distinct_slots"),
        # Outgoing view
        Index("idx_swap_requests_requester_created", "requester_id", "created_at"),
        # Incoming view
        Index("idx_swap_requests_recipient_status_created", "recipient_id", "status", "created_at"),
        # At most one PENDING request per slot
        Index(
            "uq_swap_requests_pending_my_slot",
            "my_slot_id",
            unique=True,
            postgresql_where=text("status = 'PENDING'"),
        ),
        Index(
            "uq_swap_requests_pending_their_slot",
            "their_slot_id",
            unique=True,
            postgresql_where=text("status = 'PENDING'"),
        ),
    )

    def __repr__(self) -> str:
        return f"<SwapRequest(id={self.id}, requester_id={self.requester_id}, status='{self.status.value}')>"
