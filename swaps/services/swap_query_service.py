"""
Swap query service - read-only projections of the swap ledger.

- list_incoming: requests awaiting the actor's response (PENDING only)
- list_outgoing: requests the actor proposed (any status)

Both are ordered newest first and resolved with principal and slot
summaries. All reads for one call happen inside a single transaction, so
a view is consistent as of one point in time. Nothing is written.
"""

import logging
from collections.abc import Callable
from uuid import UUID

from database.models import SwapStatus
from swaps.records import SlotSummary, SwapRequestRecord, SwapRequestView
from swaps.transactions.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class SwapQueryService:
    def __init__(self, uow_factory: Callable[[], UnitOfWork] = UnitOfWork):
        self._uow_factory = uow_factory

    async def list_incoming(self, actor_id: UUID) -> list[SwapRequestView]:
        async with self._uow_factory() as uow:
            swaps = await uow.ledger.list_for_recipient(actor_id, status=SwapStatus.PENDING)
            views = await self._resolve(uow, swaps)

        logger.info(
            f"Listed {len(views)} incoming swap requests",
            extra={"actor_id": str(actor_id)},
        )
        return views

    async def list_outgoing(self, actor_id: UUID) -> list[SwapRequestView]:
        async with self._uow_factory() as uow:
            swaps = await uow.ledger.list_for_requester(actor_id)
            views = await self._resolve(uow, swaps)

        logger.info(
            f"Listed {len(views)} outgoing swap requests",
            extra={"actor_id": str(actor_id)},
        )
        return views

    @staticmethod
    async def _resolve(uow: UnitOfWork, swaps: list[SwapRequestRecord]) -> list[SwapRequestView]:
        if not swaps:
            return []

        slot_ids = {
            slot_id
            for swap in swaps
            for slot_id in (swap.my_slot_id, swap.their_slot_id)
            if slot_id is not None
        }
        principal_ids = {pid for swap in swaps for pid in (swap.requester_id, swap.recipient_id)}

        slots = await uow.slots.get_slots(slot_ids)
        principals = await uow.principals.get_summaries(principal_ids)

        def slot_summary(slot_id: UUID | None) -> SlotSummary | None:
            slot = slots.get(slot_id) if slot_id is not None else None
            return SlotSummary.model_validate(slot) if slot else None

        return [
            SwapRequestView(
                id=swap.id,
                status=swap.status,
                created_at=swap.created_at,
                updated_at=swap.updated_at,
                requester=principals.get(swap.requester_id),
                recipient=principals.get(swap.recipient_id),
                my_slot=slot_summary(swap.my_slot_id),
                their_slot=slot_summary(swap.their_slot_id),
            )
            for swap in swaps
        ]
