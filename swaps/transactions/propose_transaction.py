"""
Propose Transaction - opens a swap between two slots owned by different principals.

The proposal is all-or-nothing: the ledger entry (PENDING) and both slot
moves (SWAPPABLE -> SWAP_PENDING) are written in one unit of work. If any
write fails, the unit of work rolls back and neither slot nor the ledger
changes.
"""

import logging
from collections.abc import Callable
from uuid import UUID

from database.models import SlotStatus
from swaps.errors import SwapError, SwapUnavailableError
from swaps.records import SwapRequestRecord
from swaps.transactions.retry import call_with_conflict_retry
from swaps.transactions.unit_of_work import UnitOfWork
from swaps.validators import validate_proposal

logger = logging.getLogger(__name__)


class ProposeTransaction:
    """
    Atomic transaction handler for swap proposals.

    Flow:
    1. Lock both slots (ascending id order)
    2. Validate existence, ownership, self-swap and availability
    3. Create the PENDING ledger entry
    4. Move both slots SWAPPABLE -> SWAP_PENDING (conditional writes)
    5. Commit, or roll everything back

    An attempt that loses a serialization race is re-run from step 1.
    """

    def __init__(self, uow_factory: Callable[[], UnitOfWork] = UnitOfWork):
        self._uow_factory = uow_factory

    async def execute(
        self, actor_id: UUID, my_slot_id: UUID, their_slot_id: UUID
    ) -> SwapRequestRecord:
        """
        Execute the proposal.

        Args:
            actor_id: Authenticated principal proposing the swap
            my_slot_id: Slot offered by the actor
            their_slot_id: Slot requested from the counterpart

        Returns:
            The committed SwapRequestRecord (status PENDING)

        Raises:
            SwapNotFoundError, SwapForbiddenError, SwapInvalidArgumentError,
            SwapInvalidStateError: Precondition failures, nothing written
            SwapUnavailableError: Store failure, nothing written
        """
        trace_id = f"propose:{actor_id}:{my_slot_id}->{their_slot_id}"
        logger.info(
            f"[{trace_id}] Starting swap proposal",
            extra={"actor_id": str(actor_id), "slot_id": str(my_slot_id)},
        )

        try:
            swap = await call_with_conflict_retry(
                lambda: self._attempt(actor_id, my_slot_id, their_slot_id), trace_id
            )
        except SwapUnavailableError:
            logger.error(
                f"[{trace_id}] Swap proposal aborted, store unavailable",
                extra={"actor_id": str(actor_id), "error_code": "UNAVAILABLE"},
                exc_info=True,
            )
            raise
        except SwapError as e:
            logger.warning(
                f"[{trace_id}] Swap proposal rejected: {e.message}",
                extra={"actor_id": str(actor_id), "error_code": e.error_code},
            )
            raise

        logger.info(
            f"[{trace_id}] Swap request created",
            extra={"actor_id": str(actor_id), "swap_request_id": str(swap.id)},
        )
        return swap

    async def _attempt(
        self, actor_id: UUID, my_slot_id: UUID, their_slot_id: UUID
    ) -> SwapRequestRecord:
        async with self._uow_factory() as uow:
            slots = await uow.slots.get_slots([my_slot_id, their_slot_id], for_update=True)
            my_slot, their_slot = validate_proposal(actor_id, my_slot_id, their_slot_id, slots)

            swap = await uow.ledger.create(
                requester_id=actor_id,
                recipient_id=their_slot.owner_id,
                my_slot_id=my_slot.id,
                their_slot_id=their_slot.id,
            )
            await uow.slots.update_slot_state(
                my_slot.id, SlotStatus.SWAP_PENDING, expected_state=SlotStatus.SWAPPABLE
            )
            await uow.slots.update_slot_state(
                their_slot.id, SlotStatus.SWAP_PENDING, expected_state=SlotStatus.SWAPPABLE
            )

            await uow.commit()
        return swap
