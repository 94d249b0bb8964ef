"""Utility functions."""

from token_service.utils.units import (
    lamports_to_sol,
    raw_to_ui_amount,
    ui_to_raw_amount,
)
from token_service.utils.validators import (
    ensure_solana_address,
    is_valid_solana_address,
    validate_solana_address,
)

__all__ = [
    "validate_solana_address",
    "is_valid_solana_address",
    "ensure_solana_address",
    "raw_to_ui_amount",
    "ui_to_raw_amount",
    "lamports_to_sol",
]
