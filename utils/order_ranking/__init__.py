# utils/order_ranking/__init__.py
"""
Order Ranking Module

Utilities for order registration and the monthly operator ranking.

Components:
- access_control: Role-based data access (admin/operator)
- models: Order, Metric, Operator and ranking records
- ranking: Aggregation, weighted scoring and position assignment
- custom_fields: Admin-defined order fields (text/number/boolean/list)
- queries: SQL queries for orders, settings and users
- periods: Month/year bounds
- filters: Period selector components
- charts: Altair visualizations
- export: Orders CSV and formatted Excel ranking report

Usage:
    from utils.order_ranking import (
        AccessControl,
        OrderQueries,
        SettingsQueries,
        compute_ranking,
        find_position,
    )
"""

from .access_control import AccessControl
from .queries import OrderQueries, SettingsQueries, UserQueries, RankingQueries
from .ranking import (
    aggregate_orders,
    score_aggregate,
    assign_positions,
    compute_ranking,
    find_position,
    weight_sum_warning,
    ranking_to_dataframe,
    mark_current_operator,
)
from .models import (
    Order,
    Metric,
    Operator,
    OperatorAggregate,
    RankedEntry,
    RankPosition,
    orders_from_frame,
    metrics_from_frame,
    operators_from_frame,
)
from .custom_fields import FieldKind, decode_field, fields_from_frame, collect_values
from .periods import period_bounds, period_label, year_options
from .formatters import format_currency, format_score, format_date
from .filters import PeriodFilter
from .charts import RankingCharts
from .export import RankingExport, orders_to_csv, export_file_name

# Constants
from .constants import (
    ADMIN_ROLE,
    OPERATOR_ROLE,
    PRODUCTS,
    METRIC_LABELS,
    MONTH_NAMES,
    COLORS,
    MEDALS,
)

__all__ = [
    # Classes
    'AccessControl',
    'OrderQueries',
    'SettingsQueries',
    'UserQueries',
    'RankingQueries',
    'PeriodFilter',
    'RankingCharts',
    'RankingExport',

    # Ranking
    'aggregate_orders',
    'score_aggregate',
    'assign_positions',
    'compute_ranking',
    'find_position',
    'weight_sum_warning',
    'ranking_to_dataframe',
    'mark_current_operator',

    # Models
    'Order',
    'Metric',
    'Operator',
    'OperatorAggregate',
    'RankedEntry',
    'RankPosition',
    'orders_from_frame',
    'metrics_from_frame',
    'operators_from_frame',

    # Custom fields
    'FieldKind',
    'decode_field',
    'fields_from_frame',
    'collect_values',

    # Helpers
    'period_bounds',
    'period_label',
    'year_options',
    'format_currency',
    'format_score',
    'format_date',
    'orders_to_csv',
    'export_file_name',

    # Constants
    'ADMIN_ROLE',
    'OPERATOR_ROLE',
    'PRODUCTS',
    'METRIC_LABELS',
    'MONTH_NAMES',
    'COLORS',
    'MEDALS',
]

__version__ = '1.0.0'
