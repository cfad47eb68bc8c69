# utils/order_ranking/constants.py
"""
Constants for the Order Ranking Module

Centralized configuration for:
- Role definitions
- Product catalog
- Ranking metric names
- Period definitions
- Color schemes and export styles
"""

# =====================================================================
# ROLE DEFINITIONS
# =====================================================================

ADMIN_ROLE = 'admin'

# Profiles created on first login or by an admin start as operators
OPERATOR_ROLE = 'user'

AVAILABLE_ROLES = [ADMIN_ROLE, OPERATOR_ROLE]

ROLE_LABELS = {
    ADMIN_ROLE: "👤 Administrator",
    OPERATOR_ROLE: "👥 Operator",
}

# =====================================================================
# PRODUCT CATALOG
# =====================================================================

PRODUCTS = [
    "Renda Fixa",
    "Renda Variável",
    "Fundos",
    "Alternativos",
    "Prev",
    "COE",
    "Internacional",
    "MB",
    "Iris",
    "Outros",
]

# =====================================================================
# RANKING METRICS
# =====================================================================

METRIC_REVENUE = "revenue"
METRIC_ORDER_COUNT = "orderCount"

METRIC_LABELS = {
    METRIC_REVENUE: "Revenue",
    METRIC_ORDER_COUNT: "Order Count",
}

# Seeded when the ranking_metrics table is empty
DEFAULT_METRIC_WEIGHTS = {
    METRIC_REVENUE: 50,
    METRIC_ORDER_COUNT: 50,
}

MIN_METRIC_WEIGHT = 0
MAX_METRIC_WEIGHT = 100
TARGET_WEIGHT_SUM = 100

UNRANKED_LABEL = "Unranked"
CURRENT_USER_SUFFIX = " (You)"

# =====================================================================
# PERIOD DEFINITIONS
# =====================================================================

MONTH_NAMES = {
    1: "January", 2: "February", 3: "March", 4: "April",
    5: "May", 6: "June", 7: "July", 8: "August",
    9: "September", 10: "October", 11: "November", 12: "December"
}

# =====================================================================
# COLOR SCHEME
# =====================================================================

COLORS = {
    "score": "#1f77b4",
    "current_user": "#FFA500",
    "gold": "#DAA520",
    "silver": "#A9A9A9",
    "bronze": "#CD7F32",
    "text_dark": "#333333",
}

MEDALS = {1: "🥇", 2: "🥈", 3: "🥉"}

# =====================================================================
# CHART DIMENSIONS
# =====================================================================

CHART_HEIGHT_PER_ROW = 28
CHART_MIN_HEIGHT = 200

# =====================================================================
# EXPORT SETTINGS
# =====================================================================

ORDER_EXPORT_COLUMNS = {
    'id': 'ID',
    'user_name': 'Operator',
    'client_code': 'Client',
    'product': 'Product',
    'volume': 'Volume',
    'revenue': 'Revenue',
    'created_at': 'Created At',
}

EXCEL_STYLES = {
    "header_fill_color": "1f77b4",
    "header_font_color": "FFFFFF",
    "currency_format": '"R$" #,##0.00',
    "score_format": '0.00',
}
