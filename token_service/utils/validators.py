"""
Solana address validation.

Validates that a string is a valid Solana public key address.
Uses actual base58 decoding instead of regex for accuracy.

Solana addresses:
- Use base58 encoding (no 0, O, I, l characters)
- Decode to exactly 32 bytes
- Typically 32-44 characters when encoded
"""

import base58

from token_service.core.exceptions import AddressValidationError


def validate_solana_address(address: str) -> tuple[bool, str | None]:
    """
    Validate a Solana address.

    Args:
        address: String to validate as Solana address

    Returns:
        Tuple of (is_valid, error_message)
        - (True, None) if address is valid
        - (False, "error description") if invalid

    Examples:
        >>> validate_solana_address("So11111111111111111111111111111111111111112")
        (True, None)

        >>> validate_solana_address("")
        (False, 'Address must not be empty')
    """
    if not isinstance(address, str) or not address:
        return False, "Address must not be empty"

    if address != address.strip():
        return False, "Address contains whitespace"

    # Quick length check (Solana addresses are 32-44 chars)
    if len(address) < 32 or len(address) > 44:
        return False, f"Invalid address length: {len(address)} chars (expected 32-44)"

    try:
        decoded = base58.b58decode(address)
    except ValueError:
        # base58 library raises ValueError for invalid characters
        return False, "Invalid base58 encoding"

    if len(decoded) != 32:
        return False, f"Invalid length: expected 32 bytes, got {len(decoded)}"

    return True, None


def is_valid_solana_address(address: str) -> bool:
    """Simple boolean check for Solana address validity."""
    valid, _ = validate_solana_address(address)
    return valid


def ensure_solana_address(address: str, field: str = "address") -> str:
    """
    Validate an address and return it unchanged.

    Raises:
        AddressValidationError: If the address is not a valid public key
    """
    valid, error = validate_solana_address(address)
    if not valid:
        raise AddressValidationError(
            message=f"Invalid {field}.",
            technical_message=f"Invalid {field} {address!r}: {error}",
            field=field,
        )
    return address
