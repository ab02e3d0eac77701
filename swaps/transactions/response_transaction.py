"""
Response Transaction - the recipient accepts or rejects a pending swap.

Accept: both slots exchange owners and become BUSY; ledger -> ACCEPTED.
Reject: both slots return to SWAPPABLE, owners unchanged; ledger -> REJECTED.

The ledger write and both slot writes commit together or not at all. A
failure anywhere leaves the request PENDING and both slots SWAP_PENDING.
"""

import logging
from collections.abc import Callable
from uuid import UUID

from database.models import SlotStatus, SwapStatus
from swaps.errors import SwapError, SwapUnavailableError
from swaps.records import SwapRequestRecord
from swaps.transactions.retry import call_with_conflict_retry
from swaps.transactions.unit_of_work import UnitOfWork
from swaps.validators import validate_pending_slots, validate_response

logger = logging.getLogger(__name__)


class ResponseTransaction:
    """
    Atomic transaction handler for resolving swap requests.

    Concurrent resolutions of the same request serialize on the ledger row
    lock; the loser observes a non-PENDING status and fails with
    SwapInvalidStateError without writing anything. At SERIALIZABLE the
    loser is aborted by the database instead; it is re-run and then fails
    the same way.
    """

    def __init__(self, uow_factory: Callable[[], UnitOfWork] = UnitOfWork):
        self._uow_factory = uow_factory

    async def execute(self, actor_id: UUID, request_id: UUID, accept: bool) -> SwapRequestRecord:
        """
        Execute the response.

        Args:
            actor_id: Authenticated principal responding (must be the recipient)
            request_id: Swap request to resolve
            accept: True to accept the swap, False to reject it

        Returns:
            The committed SwapRequestRecord (ACCEPTED or REJECTED)
        """
        trace_id = f"respond:{actor_id}:{request_id}"
        logger.info(
            f"[{trace_id}] Starting swap response (accept={accept})",
            extra={"actor_id": str(actor_id), "swap_request_id": str(request_id)},
        )

        try:
            resolved = await call_with_conflict_retry(
                lambda: self._attempt(actor_id, request_id, accept), trace_id
            )
        except SwapUnavailableError:
            logger.error(
                f"[{trace_id}] Swap response aborted, store unavailable",
                extra={"swap_request_id": str(request_id), "error_code": "UNAVAILABLE"},
                exc_info=True,
            )
            raise
        except SwapError as e:
            logger.warning(
                f"[{trace_id}] Swap response rejected: {e.message}",
                extra={"swap_request_id": str(request_id), "error_code": e.error_code},
            )
            raise

        logger.info(
            f"[{trace_id}] Swap request {resolved.status.value.lower()}",
            extra={"actor_id": str(actor_id), "swap_request_id": str(resolved.id)},
        )
        return resolved

    async def _attempt(self, actor_id: UUID, request_id: UUID, accept: bool) -> SwapRequestRecord:
        async with self._uow_factory() as uow:
            swap = validate_response(
                actor_id, request_id, await uow.ledger.get(request_id, for_update=True)
            )

            slot_ids = [sid for sid in (swap.my_slot_id, swap.their_slot_id) if sid is not None]
            slots = await uow.slots.get_slots(slot_ids, for_update=True)
            my_slot, their_slot = validate_pending_slots(swap, slots)

            if accept:
                await uow.slots.update_slot_owner_and_state(
                    my_slot.id,
                    new_owner_id=their_slot.owner_id,
                    new_state=SlotStatus.BUSY,
                    expected_state=SlotStatus.SWAP_PENDING,
                )
                await uow.slots.update_slot_owner_and_state(
                    their_slot.id,
                    new_owner_id=my_slot.owner_id,
                    new_state=SlotStatus.BUSY,
                    expected_state=SlotStatus.SWAP_PENDING,
                )
                new_status = SwapStatus.ACCEPTED
            else:
                await uow.slots.update_slot_state(
                    my_slot.id, SlotStatus.SWAPPABLE, expected_state=SlotStatus.SWAP_PENDING
                )
                await uow.slots.update_slot_state(
                    their_slot.id, SlotStatus.SWAPPABLE, expected_state=SlotStatus.SWAP_PENDING
                )
                new_status = SwapStatus.REJECTED

            resolved = await uow.ledger.resolve(
                swap.id, new_status, expected_version=swap.version
            )
            await uow.commit()
        return resolved
