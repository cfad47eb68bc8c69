"""
Formatting utilities for the order ranking pages
"""
import pandas as pd
from datetime import datetime, date
from decimal import Decimal, InvalidOperation
from typing import Any
import logging

logger = logging.getLogger(__name__)


def format_currency(value: Any) -> str:
    """
    Format an amount as Brazilian Real

    Args:
        value: Number, Decimal or numeric string

    Returns:
        e.g. "R$ 1.234.567,89"; "-" for missing values
    """
    try:
        if value is None or (not isinstance(value, (str, Decimal)) and pd.isna(value)):
            return "-"
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return "-"

    if not amount.is_finite():
        return "-"

    sign = "-" if amount < 0 else ""
    formatted = f"{abs(amount):,.2f}"
    # 1,234,567.89 -> 1.234.567,89
    formatted = formatted.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {formatted}"


def format_score(value: Any) -> str:
    """Scores always show exactly two decimals"""
    try:
        return f"{Decimal(str(value)):.2f}"
    except (InvalidOperation, ValueError, TypeError):
        return "0.00"


def format_date(value: Any, format_str: str = "%d/%m/%Y") -> str:
    """
    Format date consistently

    Args:
        value: Date value to format
        format_str: Output format string

    Returns:
        Formatted date string
    """
    if value is None:
        return "-"
    if isinstance(value, (datetime, date)):
        return value.strftime(format_str)
    try:
        if pd.isna(value):
            return "-"
        return pd.to_datetime(value).strftime(format_str)
    except (ValueError, TypeError):
        return str(value)
