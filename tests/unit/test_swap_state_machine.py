"""
Unit tests for swaps/state_machine.py - slot and swap request transition tables.
"""

import pytest
from uuid import uuid4

from database.models import SlotStatus, SwapStatus
from swaps.errors import SwapInvalidStateError
from swaps.state_machine import (
    SlotStateMachine,
    SwapStateMachine,
    ensure_engine_slot_transition,
    ensure_swap_transition,
)


class TestEngineSlotTransitions:
    @pytest.mark.parametrize(
        "from_state,to_state",
        [
            (SlotStatus.SWAPPABLE, SlotStatus.SWAP_PENDING),
            (SlotStatus.SWAP_PENDING, SlotStatus.BUSY),
            (SlotStatus.SWAP_PENDING, SlotStatus.SWAPPABLE),
        ],
    )
    def test_allowed(self, from_state, to_state):
        assert SlotStateMachine.can_engine_transition(from_state, to_state)

    @pytest.mark.parametrize(
        "from_state,to_state",
        [
            (SlotStatus.BUSY, SlotStatus.SWAP_PENDING),
            (SlotStatus.BUSY, SlotStatus.SWAPPABLE),
            (SlotStatus.SWAPPABLE, SlotStatus.BUSY),
            (SlotStatus.SWAP_PENDING, SlotStatus.SWAP_PENDING),
        ],
    )
    def test_rejected(self, from_state, to_state):
        assert not SlotStateMachine.can_engine_transition(from_state, to_state)

    def test_ensure_raises_with_states_in_details(self):
        slot_id = uuid4()
        with pytest.raises(SwapInvalidStateError) as exc_info:
            ensure_engine_slot_transition(slot_id, SlotStatus.BUSY, SlotStatus.SWAP_PENDING)

        assert exc_info.value.slot_id == slot_id
        assert exc_info.value.details == {"from_state": "BUSY", "to_state": "SWAP_PENDING"}


class TestOwnerSlotTransitions:
    def test_owner_toggles_between_busy_and_swappable(self):
        assert SlotStateMachine.can_owner_transition(SlotStatus.BUSY, SlotStatus.SWAPPABLE)
        assert SlotStateMachine.can_owner_transition(SlotStatus.SWAPPABLE, SlotStatus.BUSY)

    def test_owner_reasserting_state_is_allowed(self):
        assert SlotStateMachine.can_owner_transition(SlotStatus.BUSY, SlotStatus.BUSY)

    @pytest.mark.parametrize(
        "from_state,to_state",
        [
            (SlotStatus.SWAPPABLE, SlotStatus.SWAP_PENDING),
            (SlotStatus.SWAP_PENDING, SlotStatus.SWAPPABLE),
            (SlotStatus.SWAP_PENDING, SlotStatus.BUSY),
            (SlotStatus.SWAP_PENDING, SlotStatus.SWAP_PENDING),
        ],
    )
    def test_owner_never_touches_swap_pending(self, from_state, to_state):
        assert not SlotStateMachine.can_owner_transition(from_state, to_state)


class TestSwapTransitions:
    def test_pending_resolves_to_terminal_statuses(self):
        assert SwapStateMachine.can_transition(SwapStatus.PENDING, SwapStatus.ACCEPTED)
        assert SwapStateMachine.can_transition(SwapStatus.PENDING, SwapStatus.REJECTED)

    @pytest.mark.parametrize("status", [SwapStatus.ACCEPTED, SwapStatus.REJECTED])
    def test_terminal_statuses_have_no_way_out(self, status):
        assert SwapStateMachine.is_terminal(status)
        for target in SwapStatus:
            assert not SwapStateMachine.can_transition(status, target)

    def test_pending_is_not_terminal(self):
        assert not SwapStateMachine.is_terminal(SwapStatus.PENDING)

    def test_ensure_swap_transition_raises(self):
        request_id = uuid4()
        with pytest.raises(SwapInvalidStateError) as exc_info:
            ensure_swap_transition(request_id, SwapStatus.ACCEPTED, SwapStatus.REJECTED)
        assert exc_info.value.request_id == request_id
