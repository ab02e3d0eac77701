"""
Stores used by swap transactions.

Each store wraps the AsyncSession of the current unit of work and never
commits on its own:
- SlotStore: slot reads and conditional state/owner writes
- SwapLedger: swap request creation, resolution and listing
- PrincipalStore: identity summaries for views
"""

from swaps.stores.principal_store import PrincipalStore
from swaps.stores.slot_store import SlotStore
from swaps.stores.swap_ledger import SwapLedger

__all__ = ["PrincipalStore", "SlotStore", "SwapLedger"]
