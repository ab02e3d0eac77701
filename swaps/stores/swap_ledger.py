"""
Swap Ledger - persistence for swap requests and their lifecycle.

Resolution uses an optimistic version check on top of the row lock taken
by get(for_update=True): the UPDATE only matches a PENDING row whose
version is the one the caller read.
"""

import logging
from uuid import UUID, uuid4

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import SwapRequest, SwapStatus, utcnow
from swaps.errors import SwapInvalidStateError
from swaps.records import SwapRequestRecord
from swaps.state_machine import ensure_swap_transition

logger = logging.getLogger(__name__)


class SwapLedger:
    """Swap request persistence bound to one transaction."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(
        self,
        requester_id: UUID,
        recipient_id: UUID,
        my_slot_id: UUID,
        their_slot_id: UUID,
    ) -> SwapRequestRecord:
        now = utcnow()
        swap = SwapRequest(
            id=uuid4(),
            requester_id=requester_id,
            recipient_id=recipient_id,
            my_slot_id=my_slot_id,
            their_slot_id=their_slot_id,
            status=SwapStatus.PENDING,
            version=1,
            created_at=now,
            updated_at=now,
        )
        self._session.add(swap)
        await self._session.flush()  # Commit is the caller's
        return SwapRequestRecord.model_validate(swap)

    async def get(self, request_id: UUID, for_update: bool = False) -> SwapRequestRecord | None:
        stmt = select(SwapRequest).where(SwapRequest.id == request_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        swap = result.scalar_one_or_none()
        return SwapRequestRecord.model_validate(swap) if swap else None

    async def resolve(
        self, request_id: UUID, new_status: SwapStatus, expected_version: int
    ) -> SwapRequestRecord:
        """
        Move a PENDING request to a terminal status.

        Raises:
            SwapInvalidStateError: Transition not in the table, or the row is
                no longer PENDING at expected_version
        """
        ensure_swap_transition(request_id, SwapStatus.PENDING, new_status)

        stmt = (
            update(SwapRequest)
            .where(SwapRequest.id == request_id)
            .where(SwapRequest.status == SwapStatus.PENDING)
            .where(SwapRequest.version == expected_version)
            .values(
                status=new_status,
                version=SwapRequest.version + 1,
                updated_at=utcnow(),
            )
            .returning(*SwapRequest.__table__.columns)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        row = result.one_or_none()

        if row is None:
            logger.warning(
                "Swap request resolution lost the version check",
                extra={"swap_request_id": str(request_id), "error_code": "REQUEST_NOT_PENDING"},
            )
            raise SwapInvalidStateError(
                "Swap request is not pending",
                request_id=request_id,
                details={"expected_version": expected_version},
            )

        return SwapRequestRecord.model_validate(row)

    async def list_for_recipient(
        self, principal_id: UUID, status: SwapStatus | None = None
    ) -> list[SwapRequestRecord]:
        stmt = select(SwapRequest).where(SwapRequest.recipient_id == principal_id)
        if status is not None:
            stmt = stmt.where(SwapRequest.status == status)
        return await self._list(stmt)

    async def list_for_requester(
        self, principal_id: UUID, status: SwapStatus | None = None
    ) -> list[SwapRequestRecord]:
        stmt = select(SwapRequest).where(SwapRequest.requester_id == principal_id)
        if status is not None:
            stmt = stmt.where(SwapRequest.status == status)
        return await self._list(stmt)

    async def _list(self, stmt) -> list[SwapRequestRecord]:
        # Newest first, id as a stable tie-breaker
        stmt = stmt.order_by(SwapRequest.created_at.desc(), SwapRequest.id.desc())
        result = await self._session.execute(stmt)
        return [SwapRequestRecord.model_validate(swap) for swap in result.scalars().all()]
