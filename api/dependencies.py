"""
FastAPI dependencies shared by the route modules.

Authentication resolves the bearer token to a principal id through the
identity provider; routes pass that id to the engine as the actor.
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from shared.identity import AuthenticationError, authenticate
from swaps.engine import SwapEngine
from swaps.services.calendar_service import CalendarService

security = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)] = None,
) -> UUID:
    """Dependency returning the authenticated principal id."""
    token = credentials.credentials if credentials else None
    try:
        return authenticate(token)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def get_swap_engine() -> SwapEngine:
    return SwapEngine()


def get_calendar_service() -> CalendarService:
    return CalendarService()
