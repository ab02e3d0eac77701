"""Read-only principal summaries for swap request views."""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import User
from swaps.records import PrincipalSummary


class PrincipalStore:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_summaries(self, principal_ids: Iterable[UUID]) -> dict[UUID, PrincipalSummary]:
        ids = set(principal_ids)
        if not ids:
            return {}
        stmt = select(User).where(User.id.in_(ids))
        result = await self._session.execute(stmt)
        return {user.id: PrincipalSummary.model_validate(user) for user in result.scalars().all()}
