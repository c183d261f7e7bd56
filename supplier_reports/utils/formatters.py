from decimal import Decimal, InvalidOperation
from typing import Optional, Union

Number = Union[int, float, Decimal, str, None]


def _to_decimal(amount: Number) -> Decimal:
    if amount is None:
        return Decimal("0")
    try:
        return Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def _swap_separators(text: str) -> str:
    # "1,234.50" -> "1.234,50"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_currency(amount: Number, currency: str = "USD") -> str:
    """Format an amount for display: ``$1,234.50`` or ``Bs. 1.234,50``."""

    val = _to_decimal(amount)

    if currency.upper() in {"VES", "BS"}:
        return f"Bs. {_swap_separators(f'{val:,.2f}')}"

    sign = "-" if val < 0 else ""
    return f"{sign}${abs(val):,.2f}"


def format_number(value: Optional[int]) -> str:
    """Format a count with dot thousand separators (es-VE)."""

    if value is None:
        return "0"
    return f"{int(value):,}".replace(",", ".")
