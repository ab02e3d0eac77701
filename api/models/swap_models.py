"""Pydantic models for swap and calendar request bodies and responses."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StrictBool, model_validator

from database.models import SlotStatus
from swaps.records import SlotRecord, SwapRequestRecord, SwapRequestView


class SwapProposalBody(BaseModel):
    """Body of POST /api/swap-request."""
    model_config = ConfigDict(populate_by_name=True)

    my_slot_id: UUID = Field(alias="mySlotId")
    their_slot_id: UUID = Field(alias="theirSlotId")


class SwapResponseBody(BaseModel):
    """Body of POST /api/swap-response/{request_id}."""

    accept: StrictBool  # "true"/1 are rejected, a real boolean is required


class SlotCreateBody(BaseModel):
    """Body of POST /api/events."""
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1, max_length=100)
    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")
    status: SlotStatus = SlotStatus.BUSY
    description: str | None = None

    @model_validator(mode="after")
    def check_range(self) -> "SlotCreateBody":
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self


class SlotUpdateBody(BaseModel):
    """Body of PATCH /api/events/{slot_id}. Omitted fields are left unchanged."""
    model_config = ConfigDict(populate_by_name=True)

    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    start_time: datetime | None = Field(default=None, alias="startTime")
    end_time: datetime | None = Field(default=None, alias="endTime")
    status: SlotStatus | None = None


class SlotStatusBody(BaseModel):
    """Body of PATCH /api/events/{slot_id}/status."""

    status: SlotStatus


def swap_request_payload(swap: SwapRequestRecord) -> dict[str, Any]:
    return swap.model_dump(mode="json")


def swap_view_payload(view: SwapRequestView) -> dict[str, Any]:
    return view.model_dump(mode="json")


def slot_payload(slot: SlotRecord) -> dict[str, Any]:
    return slot.model_dump(mode="json")
