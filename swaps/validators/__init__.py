from swaps.validators.swap_validators import (
    validate_pending_slots,
    validate_proposal,
    validate_response,
)

__all__ = ["validate_pending_slots", "validate_proposal", "validate_response"]
