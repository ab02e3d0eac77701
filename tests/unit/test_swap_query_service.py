"""
Unit tests for swap_query_service.py - incoming and outgoing swap views.
"""

import pytest

from database.models import SlotStatus, SwapStatus


async def _propose(engine, swap_store, requester, recipient):
    mine = swap_store.add_slot(requester)
    theirs = swap_store.add_slot(recipient)
    return await engine.propose(requester, mine.id, theirs.id)


class TestListIncoming:
    @pytest.mark.asyncio
    async def test_only_pending_requests_addressed_to_actor(self, swap_engine, swap_store, alice, bob, carol):
        first = await _propose(swap_engine, swap_store, alice, bob)
        second = await _propose(swap_engine, swap_store, carol, bob)
        await _propose(swap_engine, swap_store, bob, alice)  # outgoing for bob
        resolved = await _propose(swap_engine, swap_store, carol, bob)
        await swap_engine.respond(bob, resolved.id, accept=False)

        views = await swap_engine.list_incoming(bob)

        assert [v.id for v in views] == [second.id, first.id]
        assert all(v.status == SwapStatus.PENDING for v in views)

    @pytest.mark.asyncio
    async def test_views_resolve_principals_and_slots(self, swap_engine, swap_store, alice, bob):
        swap = await _propose(swap_engine, swap_store, alice, bob)

        (view,) = await swap_engine.list_incoming(bob)

        assert view.requester.full_name == "Alice Martin"
        assert view.recipient.id == bob
        assert view.my_slot.id == swap.my_slot_id
        assert view.their_slot.id == swap.their_slot_id
        assert view.my_slot.status == SlotStatus.SWAP_PENDING

    @pytest.mark.asyncio
    async def test_empty_when_nothing_pending(self, swap_engine, alice):
        assert await swap_engine.list_incoming(alice) == []


class TestListOutgoing:
    @pytest.mark.asyncio
    async def test_all_statuses_newest_first(self, swap_engine, swap_store, alice, bob, carol):
        accepted = await _propose(swap_engine, swap_store, alice, bob)
        await swap_engine.respond(bob, accepted.id, accept=True)
        rejected = await _propose(swap_engine, swap_store, alice, carol)
        await swap_engine.respond(carol, rejected.id, accept=False)
        pending = await _propose(swap_engine, swap_store, alice, bob)

        views = await swap_engine.list_outgoing(alice)

        assert [(v.id, v.status) for v in views] == [
            (pending.id, SwapStatus.PENDING),
            (rejected.id, SwapStatus.REJECTED),
            (accepted.id, SwapStatus.ACCEPTED),
        ]

    @pytest.mark.asyncio
    async def test_accepted_view_shows_current_owners_slots(self, swap_engine, swap_store, alice, bob):
        swap = await _propose(swap_engine, swap_store, alice, bob)
        await swap_engine.respond(bob, swap.id, accept=True)

        (view,) = await swap_engine.list_outgoing(alice)

        assert view.my_slot.status == SlotStatus.BUSY
        assert view.their_slot.status == SlotStatus.BUSY

    @pytest.mark.asyncio
    async def test_deleted_slot_renders_as_none(self, swap_engine, calendar_service, swap_store, alice, bob):
        swap = await _propose(swap_engine, swap_store, alice, bob)
        await swap_engine.respond(bob, swap.id, accept=False)
        await calendar_service.delete_slot(alice, swap.my_slot_id)

        (view,) = await swap_engine.list_outgoing(alice)

        assert view.my_slot is None
        assert view.their_slot is not None

    @pytest.mark.asyncio
    async def test_listing_writes_nothing(self, swap_engine, swap_store, alice, bob):
        await _propose(swap_engine, swap_store, alice, bob)
        commits = swap_store.commits

        await swap_engine.list_outgoing(alice)
        await swap_engine.list_incoming(bob)

        assert swap_store.commits == commits
