# utils/order_ranking/models.py
"""
Record types for the ranking pipeline.

Orders, metrics and operators are decoded from query results once, at the
data boundary; aggregates and ranked entries are derived per computation
and never persisted.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, List, Mapping, NamedTuple, Optional

import pandas as pd

from .constants import UNRANKED_LABEL

logger = logging.getLogger(__name__)

ZERO = Decimal('0')
CENT = Decimal('0.01')


def to_decimal(value: Any) -> Decimal:
    """
    Parse a money/weight value, substituting zero for anything malformed.

    Non-numeric text, NaN, infinities and negative numbers all become zero.
    """
    if value is None or isinstance(value, bool):
        return ZERO

    try:
        if isinstance(value, Decimal):
            number = value
        else:
            number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        logger.debug(f"Malformed numeric value treated as zero: {value!r}")
        return ZERO

    if not number.is_finite() or number < 0:
        logger.debug(f"Out-of-range numeric value treated as zero: {value!r}")
        return ZERO

    return number


def _to_datetime(value: Any) -> Optional[datetime]:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    if isinstance(value, datetime):
        return value
    try:
        return pd.to_datetime(value).to_pydatetime()
    except (ValueError, TypeError):
        return None


@dataclass(frozen=True)
class Order:
    id: Any
    operator_id: Any
    client_code: str = ""
    product: str = ""
    volume: Any = ZERO
    revenue: Any = ZERO
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping) -> "Order":
        return cls(
            id=row.get('id'),
            operator_id=row.get('user_id'),
            client_code=row.get('client_code') or "",
            product=row.get('product') or "",
            volume=to_decimal(row.get('volume')),
            revenue=to_decimal(row.get('revenue')),
            created_at=_to_datetime(row.get('created_at')),
        )


@dataclass(frozen=True)
class Metric:
    id: Any
    name: str
    weight: Any = ZERO

    @classmethod
    def from_row(cls, row: Mapping) -> "Metric":
        return cls(
            id=row.get('id'),
            name=row.get('metric_name') or "",
            weight=to_decimal(row.get('weight')),
        )


@dataclass(frozen=True)
class Operator:
    id: Any
    name: Optional[str] = None
    email: Optional[str] = None
    role: str = ""

    @property
    def display_name(self) -> str:
        return self.name or self.email or str(self.id)

    @classmethod
    def from_row(cls, row: Mapping) -> "Operator":
        name = row.get('name')
        email = row.get('email')
        return cls(
            id=row.get('id'),
            name=name if isinstance(name, str) and name.strip() else None,
            email=email if isinstance(email, str) else None,
            role=row.get('role') or "",
        )


@dataclass(frozen=True)
class OperatorAggregate:
    operator_id: Any
    operator_name: str
    total_revenue: Decimal = ZERO
    order_count: int = 0


@dataclass(frozen=True)
class RankedEntry:
    operator_id: Any
    operator_name: str
    total_revenue: Decimal
    order_count: int
    score: Decimal
    position: int

    @property
    def score_display(self) -> str:
        return f"{self.score.quantize(CENT)}"


class RankPosition(NamedTuple):
    """Where one operator stands in a computed ranking."""
    position: Optional[int]
    score: Decimal

    @property
    def is_ranked(self) -> bool:
        return self.position is not None

    @property
    def label(self) -> str:
        return f"#{self.position}" if self.is_ranked else UNRANKED_LABEL


# =============================================================================
# DATAFRAME BOUNDARY
# =============================================================================

def orders_from_frame(df: pd.DataFrame) -> List[Order]:
    if df is None or df.empty:
        return []
    return [Order.from_row(row) for row in df.to_dict('records')]


def metrics_from_frame(df: pd.DataFrame) -> List[Metric]:
    if df is None or df.empty:
        return []
    return [Metric.from_row(row) for row in df.to_dict('records')]


def operators_from_frame(df: pd.DataFrame) -> List[Operator]:
    if df is None or df.empty:
        return []
    return [Operator.from_row(row) for row in df.to_dict('records')]
