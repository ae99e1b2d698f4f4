"""Presentation-time currency formatting."""

from __future__ import annotations

from tier_allocation.utils.config import get_settings


def format_currency(amount: float, symbol: str | None = None) -> str:
    """Format ``amount`` as ``$1,234.56``; negatives render as ``-$1,234.56``."""
    resolved_symbol = get_settings().currency_symbol if symbol is None else symbol
    sign = "-" if amount < 0 else ""
    return f"{sign}{resolved_symbol}{abs(amount):,.2f}"
