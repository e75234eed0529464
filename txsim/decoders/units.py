"""Integer-exact formatting of token and ether amounts."""


def format_units(value: int, decimals: int) -> str:
    """Render a raw integer amount in human units, e.g. 1500000 @ 6 -> "1.5"."""
    sign = "-" if value < 0 else ""
    whole, frac = divmod(abs(value), 10**decimals)
    frac_str = str(frac).zfill(decimals).rstrip("0") if decimals else ""
    return f"{sign}{whole}.{frac_str or '0'}"


def format_ether(value: int) -> str:
    """Render wei as ether."""
    return format_units(value, 18)


def parse_quantity(value: str) -> int:
    """Parse a 0x-hex or decimal quantity string."""
    value = value.strip()
    if value.lower().startswith("0x"):
        return int(value, 16)
    return int(value, 10)
