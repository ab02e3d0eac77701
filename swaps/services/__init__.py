from swaps.services.calendar_service import CalendarService
from swaps.services.swap_query_service import SwapQueryService

__all__ = ["CalendarService", "SwapQueryService"]
