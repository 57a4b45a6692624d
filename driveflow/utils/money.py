"""Currency helpers working in integer minor units"""


def percentage_of(amount_cents: int, rate_bps: int) -> int:
    """Apply a basis-point rate, rounding half-up to the nearest cent"""
    return (amount_cents * rate_bps + 5_000) // 10_000


def format_money(amount_cents: int, currency: str = "KES") -> str:
    """Render an amount the way the booking screens show it, e.g. 'KES 15,000'"""
    whole, cents = divmod(abs(amount_cents), 100)
    sign = "-" if amount_cents < 0 else ""
    if cents:
        return f"{currency} {sign}{whole:,}.{cents:02d}"
    return f"{currency} {sign}{whole:,}"
