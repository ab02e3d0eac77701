"""
Unit of work - one database transaction per engine operation.

The unit of work opens an AsyncSession, applies the configured isolation
level and hands the stores to the caller. Nothing is persisted unless
commit() succeeds; leaving the block any other way rolls back every write
issued inside it. Database failures surface as SwapUnavailableError, and
serialization failures as its SwapConflictError subclass so the caller
can re-run the transaction.

Usage:
    async with UnitOfWork() as uow:
        slot = await uow.slots.get_slot(slot_id, for_update=True)
        ...
        await uow.commit()
"""

import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from database.connection import get_async_session
from shared.config import get_settings
from swaps.errors import SwapConflictError, SwapUnavailableError
from swaps.stores import PrincipalStore, SlotStore, SwapLedger

logger = logging.getLogger(__name__)

# Connection failures can reach us as raw OSError from the driver
STORE_ERRORS = (SQLAlchemyError, OSError)

ALLOWED_ISOLATION_LEVELS = frozenset({"READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE"})

# serialization_failure, deadlock_detected
SERIALIZATION_FAILURE_CODES = frozenset({"40001", "40P01"})


def is_serialization_failure(error: BaseException) -> bool:
    """True when PostgreSQL aborted the transaction to resolve a concurrent conflict."""
    orig = getattr(error, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    return code in SERIALIZATION_FAILURE_CODES


def translate_store_error(error: BaseException, message: str) -> SwapUnavailableError:
    if is_serialization_failure(error):
        return SwapConflictError(
            "Swap transaction conflicted with a concurrent one, no changes were applied"
        )
    return SwapUnavailableError(message)


class UnitOfWork:
    """Async context manager wrapping a single store transaction."""

    slots: SlotStore
    ledger: SwapLedger
    principals: PrincipalStore

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]] = get_async_session,
        isolation_level: str | None = None,
    ):
        self._session_factory = session_factory
        level = (isolation_level or get_settings().SWAP_ISOLATION_LEVEL).upper()
        if level not in ALLOWED_ISOLATION_LEVELS:
            raise ValueError(f"Unsupported isolation level: {level}")
        self._isolation_level = level
        self._session_cm: AbstractAsyncContextManager[AsyncSession] | None = None
        self.session: AsyncSession | None = None
        self._committed = False

    async def __aenter__(self) -> "UnitOfWork":
        self._session_cm = self._session_factory()
        self.session = await self._session_cm.__aenter__()
        self._committed = False

        try:
            await self._begin()
        except STORE_ERRORS as e:
            await self._session_cm.__aexit__(type(e), e, e.__traceback__)
            logger.error("Could not open swap transaction", exc_info=True)
            raise SwapUnavailableError("Store is unavailable, try again later") from e

        self.slots = SlotStore(self.session)
        self.ledger = SwapLedger(self.session)
        self.principals = PrincipalStore(self.session)
        return self

    async def _begin(self) -> None:
        # SET TRANSACTION must be the first statement of the transaction
        if self.session.get_bind().dialect.name == "postgresql":
            await self.session.execute(
                text(f"SET TRANSACTION ISOLATION LEVEL {self._isolation_level}")
            )

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except STORE_ERRORS as e:
            logger.error("Swap transaction commit failed", exc_info=True)
            raise translate_store_error(
                e, "Swap transaction could not be committed, no changes were applied"
            ) from e
        self._committed = True

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        try:
            if not self._committed:
                await self.session.rollback()
        except SQLAlchemyError:
            # The connection is being discarded either way
            logger.warning("Rollback failed on swap transaction", exc_info=True)
        finally:
            await self._session_cm.__aexit__(exc_type, exc_val, exc_tb)

        if isinstance(exc_val, STORE_ERRORS):
            if is_serialization_failure(exc_val):
                logger.warning(f"Swap transaction aborted by a serialization failure: {exc_val}")
            else:
                logger.error(
                    "Swap transaction aborted by a store error",
                    exc_info=(exc_type, exc_val, exc_tb),
                )
            raise translate_store_error(
                exc_val, "Store is unavailable, no changes were applied"
            ) from exc_val

        return False
