"""
API routes for slot-swap negotiation.

Endpoints:
- POST /api/swap-request: propose a swap
- POST /api/swap-response/{request_id}: accept or reject a swap
- GET /api/swap-requests/incoming: pending requests awaiting the caller
- GET /api/swap-requests/outgoing: requests the caller proposed

Engine failures (SwapError) are rendered by the application-level
exception handler in api.main.
"""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from api.dependencies import get_current_principal, get_swap_engine
from api.models.swap_models import (
    SwapProposalBody,
    SwapResponseBody,
    swap_request_payload,
    swap_view_payload,
)
from swaps.engine import SwapEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.post("/swap-request", status_code=status.HTTP_201_CREATED)
async def create_swap_request(
    body: SwapProposalBody,
    actor_id: Annotated[UUID, Depends(get_current_principal)],
    engine: Annotated[SwapEngine, Depends(get_swap_engine)],
):
    """
    Propose swapping the caller's slot for another principal's slot.

    **Returns:** `{"success": true, "message": "Swap request created", "request": {...}}`

    **Errors:**
    - **404**: Slot not found
    - **403**: Caller does not own mySlotId
    - **400**: theirSlotId is the caller's own slot
    - **409**: A slot is not SWAPPABLE
    - **503**: Store unavailable, retry
    """
    swap = await engine.propose(actor_id, body.my_slot_id, body.their_slot_id)
    return {
        "success": True,
        "message": "Swap request created",
        "request": swap_request_payload(swap),
    }


@router.post("/swap-response/{request_id}")
async def respond_to_swap_request(
    request_id: UUID,
    body: SwapResponseBody,
    actor_id: Annotated[UUID, Depends(get_current_principal)],
    engine: Annotated[SwapEngine, Depends(get_swap_engine)],
):
    """
    Accept or reject a pending swap addressed to the caller.

    **Errors:**
    - **404**: Swap request (or one of its slots) not found
    - **409**: Request is not pending, or a slot left SWAP_PENDING
    - **403**: Caller is not the recipient
    - **503**: Store unavailable, retry
    """
    swap = await engine.respond(actor_id, request_id, body.accept)
    return {
        "success": True,
        "message": "Swap request accepted" if body.accept else "Swap request rejected",
        "request": swap_request_payload(swap),
    }


@router.get("/swap-requests/incoming")
async def list_incoming_swap_requests(
    actor_id: Annotated[UUID, Depends(get_current_principal)],
    engine: Annotated[SwapEngine, Depends(get_swap_engine)],
):
    views = await engine.list_incoming(actor_id)
    return {
        "success": True,
        "count": len(views),
        "requests": [swap_view_payload(v) for v in views],
    }


@router.get("/swap-requests/outgoing")
async def list_outgoing_swap_requests(
    actor_id: Annotated[UUID, Depends(get_current_principal)],
    engine: Annotated[SwapEngine, Depends(get_swap_engine)],
):
    views = await engine.list_outgoing(actor_id)
    return {
        "success": True,
        "count": len(views),
        "requests": [swap_view_payload(v) for v in views],
    }
