# utils/order_ranking/ranking.py
"""
Monthly Ranking Computation

Pipeline:
    orders ─► aggregate_orders ─► score_aggregate ─► assign_positions

- Aggregation groups the period's orders by operator (every roster operator
  is present, even with no orders)
- Scoring is a weighted sum of raw totals: value * weight / 100 per metric
- Positions are dense and 1-based; ties on score are ordered by operator
  name (case-insensitive), then operator id

All functions are pure. Callers fetch a snapshot (orders already filtered
to the period, metric weights, roster) and recompute on every request.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from .constants import CURRENT_USER_SUFFIX, METRIC_ORDER_COUNT, METRIC_REVENUE, TARGET_WEIGHT_SUM
from .models import (
    CENT,
    ZERO,
    Metric,
    Operator,
    OperatorAggregate,
    Order,
    RankedEntry,
    RankPosition,
    to_decimal,
)

logger = logging.getLogger(__name__)

HUNDRED = Decimal('100')

METRIC_VALUES: Dict[str, Callable[[OperatorAggregate], Decimal]] = {
    METRIC_REVENUE: lambda agg: agg.total_revenue,
    METRIC_ORDER_COUNT: lambda agg: Decimal(agg.order_count),
}


# =============================================================================
# ORDER AGGREGATOR
# =============================================================================

def aggregate_orders(
    orders: Iterable[Order],
    operators: Iterable[Operator]
) -> List[OperatorAggregate]:
    """
    Sum revenue and count orders per roster operator.

    Args:
        orders: Orders in the reporting period
        operators: Operator roster (display names come from here)

    Returns:
        One OperatorAggregate per roster operator, in roster order
    """
    roster: Dict[str, Operator] = {}
    for operator in operators:
        key = str(operator.id)
        if key not in roster:
            roster[key] = operator

    revenue = {key: ZERO for key in roster}
    counts = {key: 0 for key in roster}
    dropped = 0

    for order in orders:
        key = str(order.operator_id)
        if key not in roster:
            dropped += 1
            continue
        revenue[key] += to_decimal(order.revenue)
        counts[key] += 1

    if dropped:
        logger.warning(f"Dropped {dropped} order(s) referencing operators outside the roster")

    return [
        OperatorAggregate(
            operator_id=operator.id,
            operator_name=operator.display_name,
            total_revenue=revenue[key],
            order_count=counts[key],
        )
        for key, operator in roster.items()
    ]


# =============================================================================
# SCORER
# =============================================================================

def score_aggregate(aggregate: OperatorAggregate, metrics: Iterable[Metric]) -> Decimal:
    """
    Weighted sum of an operator's totals, rounded half-up to cents.

    Unknown metric names and malformed weights contribute nothing.
    """
    score = ZERO

    for metric in metrics:
        value_of = METRIC_VALUES.get(metric.name)
        if value_of is None:
            logger.warning(f"Ignoring unknown ranking metric: {metric.name!r}")
            continue
        score += value_of(aggregate) * to_decimal(metric.weight) / HUNDRED

    return score.quantize(CENT, rounding=ROUND_HALF_UP)


# =============================================================================
# RANK ASSIGNER
# =============================================================================

def _rank_key(item: Tuple[OperatorAggregate, Decimal]):
    aggregate, score = item
    return (-score, aggregate.operator_name.casefold(), str(aggregate.operator_id))


def assign_positions(scored: Iterable[Tuple[OperatorAggregate, Decimal]]) -> List[RankedEntry]:
    """Order by score descending and number positions 1..N."""
    ordered = sorted(scored, key=_rank_key)

    return [
        RankedEntry(
            operator_id=aggregate.operator_id,
            operator_name=aggregate.operator_name,
            total_revenue=aggregate.total_revenue,
            order_count=aggregate.order_count,
            score=score,
            position=index + 1,
        )
        for index, (aggregate, score) in enumerate(ordered)
    ]


# =============================================================================
# ENTRY POINTS
# =============================================================================

def compute_ranking(
    orders: Iterable[Order],
    metrics: Iterable[Metric],
    operators: Iterable[Operator]
) -> List[RankedEntry]:
    """
    Build the ranking for one snapshot of orders, metric weights and roster.

    Usage:
        ranked = compute_ranking(orders, metrics, operators)
        mine = find_position(ranked, current_user_id)
    """
    metrics = list(metrics)
    aggregates = aggregate_orders(orders, operators)
    scored = [(aggregate, score_aggregate(aggregate, metrics)) for aggregate in aggregates]
    ranked = assign_positions(scored)

    logger.debug(f"Ranking computed: {len(ranked)} operators, {len(metrics)} metrics")
    return ranked


def find_position(ranked: Sequence[RankedEntry], operator_id) -> RankPosition:
    """Look up an operator's position and score; unranked operators score zero."""
    key = str(operator_id)
    for entry in ranked:
        if str(entry.operator_id) == key:
            return RankPosition(entry.position, entry.score)
    return RankPosition(None, ZERO.quantize(CENT))


def weight_sum_warning(metrics: Iterable[Metric]) -> Optional[str]:
    """Advisory message when configured weights do not add up to 100%."""
    metrics = list(metrics)
    if not metrics:
        return None
    total = sum((to_decimal(m.weight) for m in metrics), ZERO)
    if total == TARGET_WEIGHT_SUM:
        return None
    return f"Weights add up to {total.normalize():f}%; they should total {TARGET_WEIGHT_SUM}% for a balanced ranking."


def ranking_to_dataframe(ranked: Sequence[RankedEntry]) -> pd.DataFrame:
    """Flatten a ranking for tables, charts and exports."""
    columns = ['position', 'operator_id', 'operator_name', 'total_revenue', 'order_count', 'score']
    if not ranked:
        return pd.DataFrame(columns=columns)

    return pd.DataFrame([
        {
            'position': entry.position,
            'operator_id': entry.operator_id,
            'operator_name': entry.operator_name,
            'total_revenue': float(entry.total_revenue),
            'order_count': entry.order_count,
            'score': float(entry.score),
        }
        for entry in ranked
    ], columns=columns)


def mark_current_operator(ranking_df: pd.DataFrame, user_id, suffix: str = CURRENT_USER_SUFFIX) -> pd.DataFrame:
    """Copy of the ranking table with the signed-in operator's name suffixed."""
    marked = ranking_df.copy()
    if marked.empty or user_id is None:
        return marked

    is_me = marked['operator_id'].astype(str) == str(user_id)
    marked.loc[is_me, 'operator_name'] = marked.loc[is_me, 'operator_name'].astype(str) + suffix
    return marked
