"""
Swap Engine - the single entry point for slot-swap negotiation.

Operations:
- propose(actor, my_slot_id, their_slot_id) -> SwapRequestRecord
- respond(actor, request_id, accept) -> SwapRequestRecord
- list_incoming(actor) -> list[SwapRequestView]
- list_outgoing(actor) -> list[SwapRequestView]

The actor id is trusted as already authenticated. Every mutating call
runs as one unit of work; failures raise a SwapError subclass and leave
no partial effect.
"""

from collections.abc import Callable
from uuid import UUID

from swaps.records import SwapRequestRecord, SwapRequestView
from swaps.services.swap_query_service import SwapQueryService
from swaps.transactions import ProposeTransaction, ResponseTransaction, UnitOfWork


class SwapEngine:
    def __init__(self, uow_factory: Callable[[], UnitOfWork] = UnitOfWork):
        self._propose = ProposeTransaction(uow_factory)
        self._respond = ResponseTransaction(uow_factory)
        self._queries = SwapQueryService(uow_factory)

    async def propose(
        self, actor_id: UUID, my_slot_id: UUID, their_slot_id: UUID
    ) -> SwapRequestRecord:
        return await self._propose.execute(actor_id, my_slot_id, their_slot_id)

    async def respond(self, actor_id: UUID, request_id: UUID, accept: bool) -> SwapRequestRecord:
        return await self._respond.execute(actor_id, request_id, accept)

    async def list_incoming(self, actor_id: UUID) -> list[SwapRequestView]:
        return await self._queries.list_incoming(actor_id)

    async def list_outgoing(self, actor_id: UUID) -> list[SwapRequestView]:
        return await self._queries.list_outgoing(actor_id)
