"""
Calendar service - owner-side slot operations that border the swap engine.

Slot owners create slots, edit them, flip them between BUSY and
SWAPPABLE, delete them and browse other principals' SWAPPABLE slots. Overlap checking
lives here, not in the engine. A slot in SWAP_PENDING belongs to its
pending swap request: this service refuses to edit or delete it.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from database.models import SlotStatus
from swaps.errors import (
    SwapForbiddenError,
    SwapInvalidArgumentError,
    SwapInvalidStateError,
    SwapNotFoundError,
)
from swaps.records import SlotRecord
from swaps.transactions.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class CalendarService:
    def __init__(self, uow_factory: Callable[[], UnitOfWork] = UnitOfWork):
        self._uow_factory = uow_factory

    async def create_slot(
        self,
        owner_id: UUID,
        title: str,
        start_time: datetime,
        end_time: datetime,
        status: SlotStatus = SlotStatus.BUSY,
        description: str | None = None,
    ) -> SlotRecord:
        """
        Create a slot for owner_id.

        Raises:
            SwapInvalidArgumentError: end_time <= start_time, or SWAP_PENDING requested
            SwapInvalidStateError: Range overlaps one of the owner's slots
        """
        if end_time <= start_time:
            raise SwapInvalidArgumentError("End time must be after start time")
        if status == SlotStatus.SWAP_PENDING:
            raise SwapInvalidArgumentError("Slots cannot be created in SWAP_PENDING state")

        async with self._uow_factory() as uow:
            conflicts = await uow.slots.find_overlapping(owner_id, start_time, end_time)
            if conflicts:
                logger.warning(
                    f"Slot creation conflicts with {len(conflicts)} existing slots",
                    extra={"actor_id": str(owner_id), "error_code": "SLOT_CONFLICT"},
                )
                raise SwapInvalidStateError(
                    "This event conflicts with an existing event",
                    details={"conflicting_slot_ids": [str(c.id) for c in conflicts]},
                )

            slot = await uow.slots.create_slot(
                owner_id=owner_id,
                title=title,
                start_time=start_time,
                end_time=end_time,
                status=status,
                description=description,
            )
            await uow.commit()

        logger.info(
            "Slot created",
            extra={"actor_id": str(owner_id), "slot_id": str(slot.id)},
        )
        return slot

    async def set_slot_status(
        self, actor_id: UUID, slot_id: UUID, new_status: SlotStatus
    ) -> SlotRecord:
        """Owner toggles a slot between BUSY and SWAPPABLE."""
        async with self._uow_factory() as uow:
            slot = await self._get_owned_slot(uow, actor_id, slot_id)

            if slot.status == SlotStatus.SWAP_PENDING:
                raise SwapInvalidStateError(
                    "Slot is part of a pending swap; respond to the swap request instead",
                    slot_id=slot_id,
                )

            if slot.status != new_status:
                await uow.slots.update_owner_slot_state(
                    slot_id, new_status, expected_state=slot.status
                )
            updated = await uow.slots.get_slot(slot_id)
            await uow.commit()

        logger.info(
            f"Slot status set to {new_status.value}",
            extra={"actor_id": str(actor_id), "slot_id": str(slot_id)},
        )
        return updated

    async def delete_slot(self, actor_id: UUID, slot_id: UUID) -> None:
        async with self._uow_factory() as uow:
            slot = await self._get_owned_slot(uow, actor_id, slot_id, action="delete")
            await uow.slots.delete_slot(slot_id, expected_state=slot.status)
            await uow.commit()

        logger.info("Slot deleted", extra={"actor_id": str(actor_id), "slot_id": str(slot_id)})

    async def get_slot(self, actor_id: UUID, slot_id: UUID) -> SlotRecord:
        async with self._uow_factory() as uow:
            return await self._get_owned_slot(
                uow, actor_id, slot_id, for_update=False, action="access"
            )

    async def update_slot(
        self,
        actor_id: UUID,
        slot_id: UUID,
        *,
        title: str | None = None,
        description: str | None = None,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
        status: SlotStatus | None = None,
    ) -> SlotRecord:
        """
        Owner edit of a slot. Arguments left as None are unchanged.

        The new range is the stored one overlaid with start_time/end_time and
        is checked for overlap against the owner's other slots.

        Raises:
            SwapInvalidArgumentError: Nothing to update, or the resulting range is empty
            SwapNotFoundError: Slot does not exist
            SwapForbiddenError: Actor does not own the slot
            SwapInvalidStateError: Slot is SWAP_PENDING, or the new range overlaps
        """
        changes = {
            field: value
            for field, value in (
                ("title", title),
                ("description", description),
                ("start_time", start_time),
                ("end_time", end_time),
                ("status", status),
            )
            if value is not None
        }
        if not changes:
            raise SwapInvalidArgumentError("No fields provided to update")

        async with self._uow_factory() as uow:
            slot = await self._get_owned_slot(uow, actor_id, slot_id)

            if slot.status == SlotStatus.SWAP_PENDING:
                raise SwapInvalidStateError(
                    "Slot is part of a pending swap and cannot be edited",
                    slot_id=slot_id,
                )

            new_start = start_time or slot.start_time
            new_end = end_time or slot.end_time
            if new_end <= new_start:
                raise SwapInvalidArgumentError("End time must be after start time")

            if start_time is not None or end_time is not None:
                conflicts = await uow.slots.find_overlapping(
                    actor_id, new_start, new_end, exclude_id=slot_id
                )
                if conflicts:
                    logger.warning(
                        f"Slot update conflicts with {len(conflicts)} existing slots",
                        extra={
                            "actor_id": str(actor_id),
                            "slot_id": str(slot_id),
                            "error_code": "SLOT_CONFLICT",
                        },
                    )
                    raise SwapInvalidStateError(
                        "Updated times conflict with an existing event",
                        slot_id=slot_id,
                        details={"conflicting_slot_ids": [str(c.id) for c in conflicts]},
                    )

            await uow.slots.update_slot_details(slot_id, expected_state=slot.status, **changes)
            updated = await uow.slots.get_slot(slot_id)
            await uow.commit()

        logger.info(
            f"Slot updated: {', '.join(sorted(changes))}",
            extra={"actor_id": str(actor_id), "slot_id": str(slot_id)},
        )
        return updated

    async def list_my_slots(
        self,
        actor_id: UUID,
        status: SlotStatus | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> list[SlotRecord]:
        async with self._uow_factory() as uow:
            return await uow.slots.list_for_owner(
                actor_id, status=status, start_date=start_date, end_date=end_date
            )

    async def list_swappable_slots(
        self,
        actor_id: UUID,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> list[SlotRecord]:
        """Marketplace: SWAPPABLE slots owned by anyone but the actor."""
        async with self._uow_factory() as uow:
            return await uow.slots.list_swappable(
                exclude_owner_id=actor_id, start_date=start_date, end_date=end_date
            )

    @staticmethod
    async def _get_owned_slot(
        uow: UnitOfWork,
        actor_id: UUID,
        slot_id: UUID,
        for_update: bool = True,
        action: str = "update",
    ) -> SlotRecord:
        slot = await uow.slots.get_slot(slot_id, for_update=for_update)
        if slot is None:
            raise SwapNotFoundError("Event not found", slot_id=slot_id)
        if slot.owner_id != actor_id:
            raise SwapForbiddenError(f"Not authorized to {action} this event", slot_id=slot_id)
        return slot
