"""
Immutable records returned by the stores and the swap engine.

Records are detached snapshots: reading one never keeps a session or a
row lock alive, and mutating state always goes back through the stores.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from database.models import SlotStatus, SwapStatus


class SlotRecord(BaseModel):
    """Point-in-time snapshot of a slot."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: UUID
    owner_id: UUID
    title: str
    start_time: datetime
    end_time: datetime
    status: SlotStatus
    description: str | None = None


class SwapRequestRecord(BaseModel):
    """Point-in-time snapshot of a swap ledger entry."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: UUID
    requester_id: UUID
    recipient_id: UUID
    my_slot_id: UUID | None
    their_slot_id: UUID | None
    status: SwapStatus
    version: int
    created_at: datetime
    updated_at: datetime


class PrincipalSummary(BaseModel):
    """Identity summary shown next to a swap request."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: UUID
    full_name: str
    email: str


class SlotSummary(BaseModel):
    """Slot summary shown next to a swap request."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: UUID
    title: str
    start_time: datetime
    end_time: datetime
    status: SlotStatus


class SwapRequestView(BaseModel):
    """Swap request resolved with both principals and both slots."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    status: SwapStatus
    created_at: datetime
    updated_at: datetime
    requester: PrincipalSummary | None
    recipient: PrincipalSummary | None
    my_slot: SlotSummary | None
    their_slot: SlotSummary | None
