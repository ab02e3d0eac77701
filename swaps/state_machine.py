"""
Explicit state machines for slot availability and swap request status.

Two tables govern slot availability:
- ENGINE_SLOT_TRANSITIONS: moves only the swap engine may make
  (SWAPPABLE -> SWAP_PENDING -> {BUSY, SWAPPABLE})
- OWNER_SLOT_TRANSITIONS: moves a slot owner may make through the
  calendar subsystem (BUSY <-> SWAPPABLE); SWAP_PENDING is never reachable
  or leavable this way

SWAP_TRANSITIONS governs the ledger: PENDING -> {ACCEPTED, REJECTED}.
Terminal statuses have no outgoing transitions.
"""

from typing import ClassVar

from database.models import SlotStatus, SwapStatus
from swaps.errors import SwapInvalidStateError


class SlotStateMachine:
    """Transition tables for slot availability."""

    ENGINE_SLOT_TRANSITIONS: ClassVar[dict[SlotStatus, frozenset[SlotStatus]]] = {
        SlotStatus.SWAPPABLE: frozenset({SlotStatus.SWAP_PENDING}),
        SlotStatus.SWAP_PENDING: frozenset({SlotStatus.BUSY, SlotStatus.SWAPPABLE}),
        SlotStatus.BUSY: frozenset(),
    }

    OWNER_SLOT_TRANSITIONS: ClassVar[dict[SlotStatus, frozenset[SlotStatus]]] = {
        SlotStatus.BUSY: frozenset({SlotStatus.SWAPPABLE}),
        SlotStatus.SWAPPABLE: frozenset({SlotStatus.BUSY}),
        SlotStatus.SWAP_PENDING: frozenset(),
    }

    @classmethod
    def can_engine_transition(cls, from_state: SlotStatus, to_state: SlotStatus) -> bool:
        return to_state in cls.ENGINE_SLOT_TRANSITIONS.get(from_state, frozenset())

    @classmethod
    def can_owner_transition(cls, from_state: SlotStatus, to_state: SlotStatus) -> bool:
        # Re-asserting the current state is a no-op, except for SWAP_PENDING
        if from_state == to_state:
            return from_state != SlotStatus.SWAP_PENDING
        return to_state in cls.OWNER_SLOT_TRANSITIONS.get(from_state, frozenset())


class SwapStateMachine:
    """Transition table for swap request status."""

    SWAP_TRANSITIONS: ClassVar[dict[SwapStatus, frozenset[SwapStatus]]] = {
        SwapStatus.PENDING: frozenset({SwapStatus.ACCEPTED, SwapStatus.REJECTED}),
        SwapStatus.ACCEPTED: frozenset(),
        SwapStatus.REJECTED: frozenset(),
    }

    @classmethod
    def can_transition(cls, from_status: SwapStatus, to_status: SwapStatus) -> bool:
        return to_status in cls.SWAP_TRANSITIONS.get(from_status, frozenset())

    @classmethod
    def is_terminal(cls, status: SwapStatus) -> bool:
        return not cls.SWAP_TRANSITIONS.get(status)


def ensure_engine_slot_transition(slot_id, from_state: SlotStatus, to_state: SlotStatus) -> None:
    """Raise SwapInvalidStateError unless the engine may move from_state -> to_state."""
    if not SlotStateMachine.can_engine_transition(from_state, to_state):
        raise SwapInvalidStateError(
            f"Slot transition {from_state.value} -> {to_state.value} is not allowed",
            slot_id=slot_id,
            details={"from_state": from_state.value, "to_state": to_state.value},
        )


def ensure_swap_transition(request_id, from_status: SwapStatus, to_status: SwapStatus) -> None:
    """Raise SwapInvalidStateError unless the ledger may move from_status -> to_status."""
    if not SwapStateMachine.can_transition(from_status, to_status):
        raise SwapInvalidStateError(
            f"Swap request transition {from_status.value} -> {to_status.value} is not allowed",
            request_id=request_id,
            details={"from_status": from_status.value, "to_status": to_status.value},
        )
