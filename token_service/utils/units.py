"""
Token amount conversions.

On-chain amounts are integers in the token's smallest unit; UI amounts
are those integers scaled down by 10**decimals. Conversions go through
Decimal so that "1000000" with 6 decimals is exactly 1.0 and back.
"""

from decimal import ROUND_DOWN, Decimal, InvalidOperation

LAMPORTS_PER_SOL = 1_000_000_000
SOL_DECIMALS = 9


def _check_decimals(decimals: int) -> None:
    if decimals < 0:
        raise ValueError(f"decimals must be >= 0, got {decimals}")


def raw_to_ui_amount(raw_amount: str | int, decimals: int) -> float:
    """
    Convert a raw on-chain amount to its UI amount.

    Args:
        raw_amount: Integer amount (decimal string or int)
        decimals: Token decimals

    Returns:
        raw_amount / 10**decimals as float

    Raises:
        ValueError: If raw_amount is not an integer or decimals < 0
    """
    _check_decimals(decimals)
    try:
        raw = Decimal(str(raw_amount).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid raw amount: {raw_amount!r}") from None

    if raw != raw.to_integral_value():
        raise ValueError(f"Raw amount must be an integer: {raw_amount!r}")

    return float(raw.scaleb(-decimals))


def ui_to_raw_amount(ui_amount: float | str, decimals: int) -> str:
    """
    Convert a UI amount back to a raw on-chain amount.

    Fractions below the smallest unit are truncated.

    Examples:
        >>> ui_to_raw_amount(0.5, 6)
        '500000'
    """
    _check_decimals(decimals)
    try:
        ui = Decimal(str(ui_amount))
    except InvalidOperation:
        raise ValueError(f"Invalid UI amount: {ui_amount!r}") from None

    raw = ui.scaleb(decimals).quantize(Decimal(1), rounding=ROUND_DOWN)
    return str(int(raw))


def lamports_to_sol(lamports: int | str) -> float:
    """Convert lamports to SOL."""
    return raw_to_ui_amount(lamports, SOL_DECIMALS)
