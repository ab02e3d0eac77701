"""
Precondition validators for swap transactions.

Checks run before any write and in a fixed order; the first failing
check raises and short-circuits the rest. Validators are pure functions
over records already read (and locked) by the calling transaction.
"""

from uuid import UUID

from database.models import SlotStatus, SwapStatus
from swaps.errors import (
    SwapForbiddenError,
    SwapInvalidArgumentError,
    SwapInvalidStateError,
    SwapNotFoundError,
)
from swaps.records import SlotRecord, SwapRequestRecord


def validate_proposal(
    actor_id: UUID,
    my_slot_id: UUID,
    their_slot_id: UUID,
    slots: dict[UUID, SlotRecord],
) -> tuple[SlotRecord, SlotRecord]:
    """
    Validate a swap proposal.

    Order:
    1. Both slots exist (NotFound)
    2. Actor owns my slot (Forbidden)
    3. Actor does not own their slot (InvalidArgument: cannot swap with self)
    4. Both slots are SWAPPABLE (InvalidState)

    Args:
        actor_id: Authenticated principal proposing the swap
        my_slot_id: Slot the actor offers
        their_slot_id: Slot the actor wants
        slots: Slots read for this transaction, keyed by id

    Returns:
        Tuple of (my_slot, their_slot)
    """
    my_slot = slots.get(my_slot_id)
    their_slot = slots.get(their_slot_id)

    for slot_id, slot in ((my_slot_id, my_slot), (their_slot_id, their_slot)):
        if slot is None:
            raise SwapNotFoundError("One or both slots were not found", slot_id=slot_id)

    if my_slot.owner_id != actor_id:
        raise SwapForbiddenError("You do not own the provided mySlotId", slot_id=my_slot_id)

    if their_slot.owner_id == actor_id:
        raise SwapInvalidArgumentError(
            "Cannot request swap for your own slot", slot_id=their_slot_id
        )

    for slot in (my_slot, their_slot):
        if slot.status != SlotStatus.SWAPPABLE:
            raise SwapInvalidStateError(
                "Both slots must be SWAPPABLE to request a swap",
                slot_id=slot.id,
                details={"status": slot.status.value},
            )

    return my_slot, their_slot


def validate_response(
    actor_id: UUID, request_id: UUID, swap: SwapRequestRecord | None
) -> SwapRequestRecord:
    """
    Validate that actor may resolve the swap request.

    Order:
    1. Request exists (NotFound)
    2. Request is PENDING (InvalidState), whatever the accept flag
    3. Actor is the recipient (Forbidden)
    """
    if swap is None:
        raise SwapNotFoundError("Swap request not found", request_id=request_id)

    if swap.status != SwapStatus.PENDING:
        raise SwapInvalidStateError(
            "Swap request is not pending",
            request_id=request_id,
            details={"status": swap.status.value},
        )

    if swap.recipient_id != actor_id:
        raise SwapForbiddenError(
            "You are not authorized to respond to this request", request_id=request_id
        )

    return swap


def validate_pending_slots(
    swap: SwapRequestRecord, slots: dict[UUID, SlotRecord]
) -> tuple[SlotRecord, SlotRecord]:
    """
    Validate that both slots of a pending request still exist and are SWAP_PENDING.

    Guards against slots deleted or edited out from under the swap between
    propose and respond. Failing here aborts the whole resolution, leaving
    the request PENDING.
    """
    resolved = []
    for slot_id in (swap.my_slot_id, swap.their_slot_id):
        slot = slots.get(slot_id) if slot_id is not None else None
        if slot is None:
            raise SwapNotFoundError(
                "One or both slots were not found",
                slot_id=slot_id,
                request_id=swap.id,
            )
        if slot.status != SlotStatus.SWAP_PENDING:
            raise SwapInvalidStateError(
                "Slots are not in SWAP_PENDING state",
                slot_id=slot_id,
                request_id=swap.id,
                details={"status": slot.status.value},
            )
        resolved.append(slot)

    return resolved[0], resolved[1]
