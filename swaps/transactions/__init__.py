"""
Atomic transaction handlers for slot swaps.

Transaction handlers encapsulate multi-step operations that must execute
atomically (all succeed or all rollback) against the slot and ledger
tables.

Key design principles:
1. Configurable isolation level (READ COMMITTED by default)
2. SELECT FOR UPDATE row locks, taken in ascending id order
3. Conditional writes checked by affected-row count
4. Complete rollback on any step failure; re-run on serialization conflicts
5. Logging with trace_id for debugging

Transaction handlers:
- ProposeTransaction: Create a PENDING swap and reserve both slots
- ResponseTransaction: Accept or reject a PENDING swap
"""

from swaps.transactions.propose_transaction import ProposeTransaction
from swaps.transactions.response_transaction import ResponseTransaction
from swaps.transactions.unit_of_work import UnitOfWork

__all__ = ["ProposeTransaction", "ResponseTransaction", "UnitOfWork"]
