"""
Tests for utils/order_ranking/ranking.py

Covers: aggregate_orders, score_aggregate, assign_positions, compute_ranking,
find_position, weight_sum_warning, ranking_to_dataframe,
mark_current_operator.
"""

from decimal import Decimal

import pytest

from utils.order_ranking.models import Metric, Operator, OperatorAggregate, Order
from utils.order_ranking.ranking import (
    aggregate_orders,
    assign_positions,
    compute_ranking,
    find_position,
    mark_current_operator,
    ranking_to_dataframe,
    score_aggregate,
    weight_sum_warning,
)


# ── Helpers ───────────────────────────────────────────────────────────


def _order(order_id, operator_id, revenue):
    return Order(id=order_id, operator_id=operator_id, revenue=revenue)


def _roster(*pairs):
    return [Operator(id=op_id, name=name) for op_id, name in pairs]


@pytest.fixture
def orders():
    return [
        _order(1, 1, Decimal("1000")),
        _order(2, 1, Decimal("500")),
        _order(3, 2, Decimal("2000")),
    ]


@pytest.fixture
def roster():
    return _roster((1, "Operator One"), (2, "Operator Two"))


# ── Worked examples ───────────────────────────────────────────────────


def test_revenue_only_ranks_by_total_revenue(orders, roster):
    ranked = compute_ranking(orders, [Metric(1, "revenue", 100)], roster)

    assert [(e.operator_id, e.position, e.score) for e in ranked] == [
        (2, 1, Decimal("2000.00")),
        (1, 2, Decimal("1500.00")),
    ]


def test_mixed_weights_combine_revenue_and_order_count(orders, roster):
    metrics = [Metric(1, "revenue", 50), Metric(2, "orderCount", 50)]
    ranked = compute_ranking(orders, metrics, roster)

    assert ranked[0].operator_id == 2
    assert ranked[0].score == Decimal("1000.50")
    assert ranked[1].operator_id == 1
    assert ranked[1].score == Decimal("751.00")
    assert ranked[1].order_count == 2


def test_no_metrics_scores_everyone_zero_and_orders_by_name(orders):
    roster = _roster((1, "bruno"), (2, "Ana"))
    ranked = compute_ranking(orders, [], roster)

    assert [e.score for e in ranked] == [Decimal("0.00"), Decimal("0.00")]
    assert [e.operator_name for e in ranked] == ["Ana", "bruno"]
    assert [e.position for e in ranked] == [1, 2]


def test_operator_without_orders_is_listed_last(orders):
    roster = _roster((1, "Operator One"), (2, "Operator Two"), (3, "Operator Three"))
    ranked = compute_ranking(orders, [Metric(1, "revenue", 100)], roster)

    last = ranked[-1]
    assert last.operator_id == 3
    assert last.position == 3
    assert last.total_revenue == Decimal("0")
    assert last.order_count == 0
    assert last.score_display == "0.00"


# ── Aggregation ───────────────────────────────────────────────────────


def test_aggregate_includes_every_roster_operator(roster):
    aggregates = aggregate_orders([], roster)

    assert [(a.operator_id, a.total_revenue, a.order_count) for a in aggregates] == [
        (1, Decimal("0"), 0),
        (2, Decimal("0"), 0),
    ]


def test_aggregate_drops_orders_outside_roster(roster):
    orders = [_order(1, 1, 100), _order(2, 99, 5000)]
    aggregates = aggregate_orders(orders, roster)

    assert sum(a.order_count for a in aggregates) == 1
    assert all(a.operator_id != 99 for a in aggregates)


def test_aggregate_matches_ids_across_types():
    orders = [_order(1, "7", 10), _order(2, 7, 20)]
    aggregates = aggregate_orders(orders, _roster((7, "Seven")))

    assert aggregates[0].order_count == 2
    assert aggregates[0].total_revenue == Decimal("30")


@pytest.mark.parametrize("bad_revenue", ["abc", None, float("nan"), float("inf"), -50, ""])
def test_malformed_revenue_counts_as_zero_but_order_still_counts(bad_revenue):
    orders = [_order(1, 1, bad_revenue), _order(2, 1, "25.50")]
    aggregate = aggregate_orders(orders, _roster((1, "One")))[0]

    assert aggregate.total_revenue == Decimal("25.50")
    assert aggregate.order_count == 2


def test_duplicate_roster_entries_are_merged():
    roster = _roster((1, "One"), (1, "One again"))
    aggregates = aggregate_orders([_order(1, 1, 10)], roster)

    assert len(aggregates) == 1
    assert aggregates[0].operator_name == "One"


# ── Scoring ───────────────────────────────────────────────────────────


def test_score_rounds_half_up_to_cents():
    aggregate = OperatorAggregate(1, "One", Decimal("0.125"), 0)
    assert score_aggregate(aggregate, [Metric(1, "revenue", 100)]) == Decimal("0.13")


def test_unknown_metric_contributes_nothing():
    aggregate = OperatorAggregate(1, "One", Decimal("100"), 3)
    metrics = [Metric(1, "revenue", 100), Metric(2, "margin", 100)]

    assert score_aggregate(aggregate, metrics) == Decimal("100.00")


def test_malformed_weight_counts_as_zero():
    aggregate = OperatorAggregate(1, "One", Decimal("100"), 3)
    metrics = [Metric(1, "revenue", "lots"), Metric(2, "orderCount", 100)]

    assert score_aggregate(aggregate, metrics) == Decimal("3.00")


def test_zero_weight_metric_does_not_change_order():
    roster = _roster(("b", "Bruno"), ("a", "Ana"))
    # Bruno has more orders, equal revenue; only revenue is weighted
    orders = [_order(1, "a", 100), _order(2, "b", 50), _order(3, "b", 50)]
    zero_count = Metric(2, "orderCount", 0)

    full = compute_ranking(orders, [Metric(1, "revenue", 100), zero_count], roster)
    reduced = compute_ranking(orders, [Metric(1, "revenue", 30), zero_count], roster)

    assert [(e.operator_id, e.score) for e in full] == [("a", Decimal("100.00")), ("b", Decimal("100.00"))]
    assert [(e.operator_id, e.score) for e in reduced] == [("a", Decimal("30.00")), ("b", Decimal("30.00"))]
    assert [e.position for e in full] == [e.position for e in reduced] == [1, 2]


def test_zero_weight_tie_on_same_name_falls_back_to_id():
    roster = _roster((20, "Ana"), (10, "Ana"))
    orders = [_order(1, 20, 100), _order(2, 10, 50), _order(3, 10, 50)]

    for revenue_weight in (100, 30):
        metrics = [Metric(1, "revenue", revenue_weight), Metric(2, "orderCount", 0)]
        assert [e.operator_id for e in compute_ranking(orders, metrics, roster)] == [10, 20]


# ── Positions ─────────────────────────────────────────────────────────


def test_positions_are_dense_and_one_based():
    roster = _roster(*[(i, f"Op {i}") for i in range(1, 8)])
    orders = [_order(i, i % 4 + 1, i * 10) for i in range(1, 20)]

    ranked = compute_ranking(orders, [Metric(1, "revenue", 100)], roster)

    assert [e.position for e in ranked] == list(range(1, 8))
    assert sum(e.order_count for e in ranked) == len(orders)


def test_ties_fall_back_to_operator_id():
    scored = [
        (OperatorAggregate("b", "Same"), Decimal("5.00")),
        (OperatorAggregate("a", "same"), Decimal("5.00")),
        (OperatorAggregate("c", "Alpha"), Decimal("1.00")),
    ]

    ranked = assign_positions(scored)

    assert [e.operator_id for e in ranked] == ["a", "b", "c"]


def test_compute_ranking_is_idempotent(orders, roster):
    metrics = [Metric(1, "revenue", 70), Metric(2, "orderCount", 30)]

    first = compute_ranking(orders, metrics, roster)
    second = compute_ranking(orders, metrics, roster)

    assert first == second
    assert first is not second


def test_empty_inputs_give_empty_ranking():
    assert compute_ranking([], [Metric(1, "revenue", 100)], []) == []


# ── Lookup / presentation ─────────────────────────────────────────────


def test_find_position_for_ranked_operator(orders, roster):
    ranked = compute_ranking(orders, [Metric(1, "revenue", 100)], roster)
    position = find_position(ranked, "1")

    assert position.position == 2
    assert position.score == Decimal("1500.00")
    assert position.label == "#2"


def test_find_position_for_unranked_operator(orders, roster):
    ranked = compute_ranking(orders, [Metric(1, "revenue", 100)], roster)
    position = find_position(ranked, 42)

    assert position.is_ranked is False
    assert position.score == Decimal("0.00")
    assert position.label == "Unranked"


@pytest.mark.parametrize("weights, expected", [
    ((50, 50), None),
    ((60, 40), None),
    ((50, 40), "90"),
    ((80, 80), "160"),
])
def test_weight_sum_warning(weights, expected):
    metrics = [Metric(i, name, w) for i, (name, w) in enumerate(zip(["revenue", "orderCount"], weights))]
    warning = weight_sum_warning(metrics)

    if expected is None:
        assert warning is None
    else:
        assert f"{expected}%" in warning


def test_weight_sum_warning_without_metrics():
    assert weight_sum_warning([]) is None


def test_ranking_to_dataframe(orders, roster):
    ranked = compute_ranking(orders, [Metric(1, "revenue", 100)], roster)
    df = ranking_to_dataframe(ranked)

    assert list(df.columns) == ['position', 'operator_id', 'operator_name', 'total_revenue', 'order_count', 'score']
    assert df.iloc[0]['score'] == pytest.approx(2000.0)
    assert ranking_to_dataframe([]).empty


def test_mark_current_operator_suffixes_only_own_row(orders, roster):
    df = ranking_to_dataframe(compute_ranking(orders, [Metric(1, "revenue", 100)], roster))

    marked = mark_current_operator(df, "1")

    assert dict(zip(marked['operator_id'], marked['operator_name'])) == {
        2: "Operator Two",
        1: "Operator One (You)",
    }
    assert "(You)" not in "".join(df['operator_name'])


def test_mark_current_operator_without_match_or_user(orders, roster):
    df = ranking_to_dataframe(compute_ranking(orders, [Metric(1, "revenue", 100)], roster))

    assert mark_current_operator(df, 99)['operator_name'].tolist() == df['operator_name'].tolist()
    assert mark_current_operator(df, None)['operator_name'].tolist() == df['operator_name'].tolist()
    assert mark_current_operator(ranking_to_dataframe([]), 1).empty
