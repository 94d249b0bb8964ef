"""
Output formatters for console output.

Converts service results into human-readable text blocks.
"""

from token_service.core.models import TokenInfo, TokenPrice, WalletPortfolio

# Trend markers for the 24h price change
TREND_UP = "▲"
TREND_DOWN = "▼"


def format_usd(value: float | None) -> str:
    """
    Format a USD amount.

    Sub-cent prices keep significant digits instead of rounding to zero.

    Returns:
        Formatted string like "$1,234.56", "$0.00001234" or "n/a"
    """
    if value is None:
        return "n/a"
    if value != 0 and abs(value) < 0.01:
        return f"${value:.8f}".rstrip("0")
    return f"${value:,.2f}"


def format_change(change: float | None) -> str:
    """Format a 24h change like "▲ 3.20%"."""
    if change is None:
        return "n/a"
    marker = TREND_UP if change >= 0 else TREND_DOWN
    return f"{marker} {abs(change):.2f}%"


def format_short_address(address: str) -> str:
    """Shorten an address to "DezX...B263"."""
    if len(address) <= 12:
        return address
    return f"{address[:4]}...{address[-4:]}"


def format_token_info(info: TokenInfo) -> str:
    """
    Format token data (metadata merged with price).

    Args:
        info: Result of TokenService.get_token_data

    Returns:
        Multi-line text block
    """
    title = info.name or "Unknown token"
    if info.symbol:
        title = f"{title} ({info.symbol})"

    lines = [
        title,
        f"  Mint:       {info.mint}",
        f"  Decimals:   {info.decimals}",
        f"  Price:      {format_usd(info.price_usd)}",
        f"  24h change: {format_change(info.price_change_percentage_24h)}",
    ]
    if info.logo_url:
        lines.append(f"  Logo:       {info.logo_url}")
    return "\n".join(lines)


def format_token_price(price: TokenPrice) -> str:
    """Format a single price quote with its source."""
    return (
        f"{format_short_address(price.mint)}: {format_usd(price.price_usd)} "
        f"({format_change(price.price_change_percentage_24h)}) via {price.provider}"
    )


def format_portfolio(portfolio: WalletPortfolio) -> str:
    """
    Format a wallet portfolio.

    Tokens are listed in the order the provider returned them; tokens
    without a known price show "n/a".

    Args:
        portfolio: Enriched portfolio from TokenService.get_wallet_portfolio

    Returns:
        Multi-line text block
    """
    lines = [
        f"Wallet {portfolio.address}",
        f"  SOL balance: {portfolio.sol_balance:,.4f}",
        f"  Total value: {format_usd(portfolio.total_value_usd)}",
    ]

    if not portfolio.tokens:
        lines.append("  No token balances")
        return "\n".join(lines)

    lines.append(f"  Tokens ({len(portfolio.tokens)}):")
    for token in portfolio.tokens:
        info = token.token_info
        label = (info.symbol if info and info.symbol else "") or format_short_address(
            token.mint
        )
        price = info.price_usd if info else None
        value = token.ui_amount * price if price is not None else None
        lines.append(
            f"  • {label}: {token.ui_amount:,.6g} × {format_usd(price)} = {format_usd(value)}"
        )

    return "\n".join(lines)
