"""
API routes for calendar slots and the swap marketplace.

Endpoints:
- GET /api/events: caller's slots (status, startDate, endDate filters)
- POST /api/events: create a slot (overlap checked)
- GET /api/events/{slot_id}: one of the caller's slots
- PATCH /api/events/{slot_id}: edit title, description, times or status
- PATCH /api/events/{slot_id}/status: toggle BUSY / SWAPPABLE
- DELETE /api/events/{slot_id}: delete a slot
- GET /api/swappable-slots: other principals' SWAPPABLE slots
"""

import logging
from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_calendar_service, get_current_principal
from api.models.swap_models import (
    SlotCreateBody,
    SlotStatusBody,
    SlotUpdateBody,
    slot_payload,
)
from database.models import SlotStatus
from swaps.services.calendar_service import CalendarService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.get("/events")
async def list_events(
    actor_id: Annotated[UUID, Depends(get_current_principal)],
    calendar: Annotated[CalendarService, Depends(get_calendar_service)],
    slot_status: Annotated[SlotStatus | None, Query(alias="status")] = None,
    start_date: Annotated[datetime | None, Query(alias="startDate")] = None,
    end_date: Annotated[datetime | None, Query(alias="endDate")] = None,
):
    slots = await calendar.list_my_slots(
        actor_id, status=slot_status, start_date=start_date, end_date=end_date
    )
    return {"success": True, "count": len(slots), "events": [slot_payload(s) for s in slots]}


@router.post("/events", status_code=status.HTTP_201_CREATED)
async def create_event(
    body: SlotCreateBody,
    actor_id: Annotated[UUID, Depends(get_current_principal)],
    calendar: Annotated[CalendarService, Depends(get_calendar_service)],
):
    slot = await calendar.create_slot(
        owner_id=actor_id,
        title=body.title,
        start_time=body.start_time,
        end_time=body.end_time,
        status=body.status,
        description=body.description,
    )
    return {"success": True, "message": "Event created successfully", "event": slot_payload(slot)}


@router.get("/events/{slot_id}")
async def get_event(
    slot_id: UUID,
    actor_id: Annotated[UUID, Depends(get_current_principal)],
    calendar: Annotated[CalendarService, Depends(get_calendar_service)],
):
    slot = await calendar.get_slot(actor_id, slot_id)
    return {"success": True, "event": slot_payload(slot)}


@router.patch("/events/{slot_id}")
async def update_event(
    slot_id: UUID,
    body: SlotUpdateBody,
    actor_id: Annotated[UUID, Depends(get_current_principal)],
    calendar: Annotated[CalendarService, Depends(get_calendar_service)],
):
    slot = await calendar.update_slot(
        actor_id,
        slot_id,
        title=body.title,
        description=body.description,
        start_time=body.start_time,
        end_time=body.end_time,
        status=body.status,
    )
    return {"success": True, "message": "Event updated successfully", "event": slot_payload(slot)}


@router.patch("/events/{slot_id}/status")
async def update_event_status(
    slot_id: UUID,
    body: SlotStatusBody,
    actor_id: Annotated[UUID, Depends(get_current_principal)],
    calendar: Annotated[CalendarService, Depends(get_calendar_service)],
):
    slot = await calendar.set_slot_status(actor_id, slot_id, body.status)
    return {
        "success": True,
        "message": "Event status updated successfully",
        "event": slot_payload(slot),
    }


@router.delete("/events/{slot_id}")
async def delete_event(
    slot_id: UUID,
    actor_id: Annotated[UUID, Depends(get_current_principal)],
    calendar: Annotated[CalendarService, Depends(get_calendar_service)],
):
    await calendar.delete_slot(actor_id, slot_id)
    return {"success": True, "message": "Event deleted successfully"}


@router.get("/swappable-slots")
async def list_swappable_slots(
    actor_id: Annotated[UUID, Depends(get_current_principal)],
    calendar: Annotated[CalendarService, Depends(get_calendar_service)],
    start_date: Annotated[datetime | None, Query(alias="startDate")] = None,
    end_date: Annotated[datetime | None, Query(alias="endDate")] = None,
):
    slots = await calendar.list_swappable_slots(actor_id, start_date=start_date, end_date=end_date)
    return {"success": True, "count": len(slots), "events": [slot_payload(s) for s in slots]}
