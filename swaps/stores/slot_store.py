"""
Slot Store - slot reads and conditional writes over an AsyncSession.

Every write is a conditional UPDATE (`WHERE status = :expected`) whose
affected-row count is checked, so two transactions can never both move
the same slot out of the state they observed. The store never commits;
the surrounding unit of work owns the transaction.
"""

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Slot, SlotStatus, utcnow
from swaps.errors import SwapInvalidStateError
from swaps.records import SlotRecord
from swaps.state_machine import SlotStateMachine, ensure_engine_slot_transition

logger = logging.getLogger(__name__)

EDITABLE_SLOT_FIELDS = frozenset({"title", "description", "start_time", "end_time", "status"})


class SlotStore:
    """Slot persistence bound to one transaction."""

    def __init__(self, session: AsyncSession):
        self._session = session

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_slot(self, slot_id: UUID, for_update: bool = False) -> SlotRecord | None:
        stmt = select(Slot).where(Slot.id == slot_id)
        # Conditional updates bypass the identity map, so always reload rows
        stmt = stmt.execution_options(populate_existing=True)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        slot = result.scalar_one_or_none()
        return SlotRecord.model_validate(slot) if slot else None

    async def get_slots(
        self, slot_ids: Iterable[UUID], for_update: bool = False
    ) -> dict[UUID, SlotRecord]:
        """
        Fetch several slots at once, keyed by id.

        Rows are read (and locked, when for_update is set) in ascending id
        order so concurrent transactions acquire locks in the same order.
        Missing ids are simply absent from the result.
        """
        ids = sorted(set(slot_ids), key=str)
        if not ids:
            return {}

        stmt = select(Slot).where(Slot.id.in_(ids)).order_by(Slot.id).execution_options(
            populate_existing=True
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        return {slot.id: SlotRecord.model_validate(slot) for slot in result.scalars().all()}

    async def find_overlapping(
        self,
        owner_id: UUID,
        start_time: datetime,
        end_time: datetime,
        exclude_id: UUID | None = None,
    ) -> list[SlotRecord]:
        """Slots of owner_id whose range intersects [start_time, end_time)."""
        stmt = (
            select(Slot)
            .where(Slot.owner_id == owner_id)
            .where(Slot.start_time < end_time)
            .where(Slot.end_time > start_time)
            .order_by(Slot.start_time)
        )
        if exclude_id is not None:
            stmt = stmt.where(Slot.id != exclude_id)
        result = await self._session.execute(stmt)
        return [SlotRecord.model_validate(slot) for slot in result.scalars().all()]

    async def list_for_owner(
        self,
        owner_id: UUID,
        status: SlotStatus | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> list[SlotRecord]:
        """Owner's slots, earliest first, optionally filtered by status and start window."""
        stmt = select(Slot).where(Slot.owner_id == owner_id).order_by(Slot.start_time)
        if status is not None:
            stmt = stmt.where(Slot.status == status)
        if start_date is not None:
            stmt = stmt.where(Slot.start_time >= start_date)
        if end_date is not None:
            stmt = stmt.where(Slot.start_time <= end_date)
        result = await self._session.execute(stmt)
        return [SlotRecord.model_validate(slot) for slot in result.scalars().all()]

    async def list_swappable(
        self,
        exclude_owner_id: UUID,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> list[SlotRecord]:
        """Other principals' SWAPPABLE slots, earliest first."""
        stmt = (
            select(Slot)
            .where(Slot.status == SlotStatus.SWAPPABLE)
            .where(Slot.owner_id != exclude_owner_id)
            .order_by(Slot.start_time)
        )
        if start_date is not None:
            stmt = stmt.where(Slot.start_time >= start_date)
        if end_date is not None:
            stmt = stmt.where(Slot.start_time <= end_date)
        result = await self._session.execute(stmt)
        return [SlotRecord.model_validate(slot) for slot in result.scalars().all()]

    # ------------------------------------------------------------------
    # Engine writes
    # ------------------------------------------------------------------

    async def update_slot_state(
        self, slot_id: UUID, new_state: SlotStatus, expected_state: SlotStatus
    ) -> None:
        """Move a slot from expected_state to new_state, or raise."""
        ensure_engine_slot_transition(slot_id, expected_state, new_state)
        await self._conditional_update(slot_id, expected_state, status=new_state)

    async def update_slot_owner_and_state(
        self,
        slot_id: UUID,
        new_owner_id: UUID,
        new_state: SlotStatus,
        expected_state: SlotStatus,
    ) -> None:
        """Reassign a slot and move its state in a single conditional write."""
        ensure_engine_slot_transition(slot_id, expected_state, new_state)
        await self._conditional_update(
            slot_id, expected_state, status=new_state, owner_id=new_owner_id
        )

    # ------------------------------------------------------------------
    # Calendar writes
    # ------------------------------------------------------------------

    async def create_slot(
        self,
        owner_id: UUID,
        title: str,
        start_time: datetime,
        end_time: datetime,
        status: SlotStatus,
        description: str | None = None,
    ) -> SlotRecord:
        slot = Slot(
            id=uuid4(),
            owner_id=owner_id,
            title=title,
            description=description,
            start_time=start_time,
            end_time=end_time,
            status=status,
        )
        self._session.add(slot)
        await self._session.flush()
        return SlotRecord.model_validate(slot)

    async def update_owner_slot_state(
        self, slot_id: UUID, new_state: SlotStatus, expected_state: SlotStatus
    ) -> None:
        """Owner-initiated availability change (BUSY <-> SWAPPABLE only)."""
        if not SlotStateMachine.can_owner_transition(expected_state, new_state):
            raise SwapInvalidStateError(
                f"Slot owners cannot move a slot from {expected_state.value} to {new_state.value}",
                slot_id=slot_id,
                details={"from_state": expected_state.value, "to_state": new_state.value},
            )
        await self._conditional_update(slot_id, expected_state, status=new_state)

    async def update_slot_details(
        self, slot_id: UUID, expected_state: SlotStatus, **changes: Any
    ) -> None:
        """
        Owner edit of title, description, times or availability.

        A status change follows the owner transition table, so a slot can
        neither enter nor leave SWAP_PENDING this way.
        """
        unknown = set(changes) - EDITABLE_SLOT_FIELDS
        if unknown:
            raise ValueError(f"Slot fields are not editable: {sorted(unknown)}")

        new_state = changes.get("status", expected_state)
        if not SlotStateMachine.can_owner_transition(expected_state, new_state):
            raise SwapInvalidStateError(
                f"Slot owners cannot move a slot from {expected_state.value} to {new_state.value}",
                slot_id=slot_id,
                details={"from_state": expected_state.value, "to_state": new_state.value},
            )
        await self._conditional_update(slot_id, expected_state, **changes)

    async def delete_slot(self, slot_id: UUID, expected_state: SlotStatus) -> None:
        if expected_state == SlotStatus.SWAP_PENDING:
            raise SwapInvalidStateError(
                "Slot is part of a pending swap and cannot be deleted",
                slot_id=slot_id,
            )
        stmt = delete(Slot).where(Slot.id == slot_id).where(Slot.status == expected_state)
        result = await self._session.execute(stmt)
        if result.rowcount != 1:
            raise SwapInvalidStateError(
                "Slot changed concurrently and was not deleted",
                slot_id=slot_id,
                details={"expected_state": expected_state.value},
            )

    async def _conditional_update(
        self, slot_id: UUID, expected_state: SlotStatus, **values
    ) -> None:
        stmt = (
            update(Slot)
            .where(Slot.id == slot_id)
            .where(Slot.status == expected_state)
            .values(updated_at=utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)

        if result.rowcount != 1:
            logger.warning(
                f"Conditional slot update matched {result.rowcount} rows",
                extra={"slot_id": str(slot_id), "error_code": "SLOT_STATE_CHANGED"},
            )
            raise SwapInvalidStateError(
                f"Slot is no longer {expected_state.value}",
                slot_id=slot_id,
                details={"expected_state": expected_state.value},
            )
