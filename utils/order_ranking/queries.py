# utils/order_ranking/queries.py
"""
SQL Queries and Mutations for Orders, Settings and Users

Handles all database interactions:
- Orders (scoped by access control) and their custom field values
- Ranking metric weights
- Custom field definitions
- Profiles (roster, roles, operator invitations)

Reads return DataFrames (empty on error). Mutations return
(success, message) tuples and never raise to the page.
"""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Mapping, Optional, Tuple

import pandas as pd
from sqlalchemy import text

from utils.auth import is_company_email, name_from_email
from utils.db import get_db_engine, get_transaction
from .access_control import AccessControl
from .constants import (
    ADMIN_ROLE,
    AVAILABLE_ROLES,
    MAX_METRIC_WEIGHT,
    MIN_METRIC_WEIGHT,
    OPERATOR_ROLE,
    PRODUCTS,
)
from .custom_fields import (
    CustomField,
    FieldKind,
    collect_values,
    encode_options,
    parse_options,
)
from .models import (
    Metric,
    Operator,
    Order,
    metrics_from_frame,
    operators_from_frame,
    orders_from_frame,
)
from .periods import period_bounds

logger = logging.getLogger(__name__)


def parse_amount(raw: Any, label: str, errors: List[str]) -> Optional[Decimal]:
    """Strict money parsing for form input; appends to errors on failure."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        errors.append(f"{label} is required")
        return None
    try:
        amount = Decimal(str(raw).strip())
    except InvalidOperation:
        errors.append(f"{label} must be a number")
        return None
    if not amount.is_finite():
        errors.append(f"{label} must be a number")
        return None
    if amount < 0:
        errors.append(f"{label} cannot be negative")
        return None
    return amount.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


class _BaseQueries:

    def __init__(self):
        self._engine = None

    @property
    def engine(self):
        """Lazy load database engine."""
        if self._engine is None:
            self._engine = get_db_engine()
        return self._engine

    def _read_df(self, query: str, params: Dict = None, raise_errors: bool = False) -> pd.DataFrame:
        try:
            return pd.read_sql(text(query), self.engine, params=params or {})
        except Exception as e:
            logger.error(f"Query failed: {e}")
            if raise_errors:
                raise
            return pd.DataFrame()


# =============================================================================
# ORDERS
# =============================================================================

class OrderQueries(_BaseQueries):
    """
    Order reads and writes, respecting access control.

    Usage:
        access = AccessControl(user_role, user_id)
        queries = OrderQueries(access)

        orders_df = queries.get_orders(year=2025, month=3)
        ok, msg = queries.create_order(...)
    """

    def __init__(self, access_control: AccessControl):
        super().__init__()
        self.access = access_control

    def get_orders(
        self,
        year: int = None,
        month: int = None,
        scope: str = None
    ) -> pd.DataFrame:
        """
        Load orders with operator names.

        Args:
            year: Restrict to a year (and month, if given)
            month: 1-12
            scope: 'mine' or 'all'; operators are always limited to 'mine'

        Returns:
            DataFrame with id, user_id, user_name, client_code, product,
            volume, revenue, created_at
        """
        if not self.access.is_admin():
            scope = 'mine'
        elif scope is None:
            scope = 'all'

        query = """
            SELECT
                o.id,
                o.user_id,
                COALESCE(p.name, p.email) AS user_name,
                o.client_code,
                o.product,
                o.volume,
                o.revenue,
                o.created_at
            FROM orders o
            LEFT JOIN profiles p ON p.id = o.user_id
            WHERE 1 = 1
        """
        params: Dict[str, Any] = {}

        if scope == 'mine':
            query += " AND o.user_id = :user_id"
            params['user_id'] = self.access.user_id

        if year is not None:
            start, end = period_bounds(year, month)
            query += " AND o.created_at >= :start AND o.created_at < :end"
            params['start'] = start
            params['end'] = end

        query += " ORDER BY o.created_at DESC, o.id DESC"

        df = self._read_df(query, params)
        logger.debug(f"Loaded {len(df)} orders (scope={scope}, year={year}, month={month})")
        return df

    @staticmethod
    def filter_orders(df: pd.DataFrame, search_term: str) -> pd.DataFrame:
        """Case-insensitive match on client code, product or operator name."""
        if df.empty or not search_term or not search_term.strip():
            return df

        term = search_term.strip().lower()
        mask = pd.Series(False, index=df.index)
        for column in ['client_code', 'product', 'user_name']:
            if column in df.columns:
                mask |= df[column].fillna('').astype(str).str.lower().str.contains(term, regex=False)
        return df[mask]

    def get_custom_values(self, order_ids: List[int]) -> pd.DataFrame:
        """Custom field values (with field names) for the given orders."""
        if not order_ids:
            return pd.DataFrame(columns=['order_id', 'field_id', 'field_name', 'value'])

        placeholders = ', '.join(f':id_{i}' for i in range(len(order_ids)))
        params = {f'id_{i}': int(order_id) for i, order_id in enumerate(order_ids)}

        query = f"""
            SELECT v.order_id, v.field_id, f.name AS field_name, v.value
            FROM order_custom_values v
            JOIN custom_fields f ON f.id = v.field_id
            WHERE v.order_id IN ({placeholders})
            ORDER BY v.order_id, f.id
        """
        return self._read_df(query, params)

    def create_order(
        self,
        operator_id: Any,
        client_code: str,
        product: str,
        volume: Any,
        revenue: Any,
        fields: List[CustomField] = None,
        custom_inputs: Mapping[int, Any] = None
    ) -> Tuple[bool, str]:
        """Validate and insert an order with its custom values in one transaction."""
        errors: List[str] = []

        if operator_id is None:
            errors.append("Operator is required")
        elif not self.access.can_register_for(operator_id):
            errors.append("You can only register orders for yourself")

        client_code = (client_code or '').strip()
        if not client_code:
            errors.append("Client code is required")

        if product not in PRODUCTS:
            errors.append("Select a product")

        volume_amount = parse_amount(volume, "Volume", errors)
        revenue_amount = parse_amount(revenue, "Revenue", errors)

        values, field_errors = collect_values(fields or [], custom_inputs or {})
        errors.extend(field_errors)

        if errors:
            return False, "; ".join(errors)

        now = datetime.now()
        try:
            with get_transaction() as conn:
                order_id = conn.execute(
                    text("""
                        INSERT INTO orders (user_id, client_code, product, volume, revenue, created_at, updated_at)
                        VALUES (:user_id, :client_code, :product, :volume, :revenue, :now, :now)
                        RETURNING id
                    """),
                    {
                        'user_id': str(operator_id),
                        'client_code': client_code,
                        'product': product,
                        # text binds keep decimals exact on every driver
                        'volume': str(volume_amount),
                        'revenue': str(revenue_amount),
                        'now': now,
                    }
                ).scalar()

                for field_id, value in values:
                    if value is None:
                        continue
                    conn.execute(
                        text("""
                            INSERT INTO order_custom_values (order_id, field_id, value)
                            VALUES (:order_id, :field_id, :value)
                        """),
                        {'order_id': order_id, 'field_id': field_id, 'value': value}
                    )

            logger.info(f"Order {order_id} created for {operator_id} by {self.access.user_id}")
            return True, "Order registered successfully"

        except Exception as e:
            logger.error(f"Error creating order: {e}")
            return False, "Could not register the order. Please try again."

    def delete_order(self, order_id: int) -> Tuple[bool, str]:
        """Delete an order (owner or admin)."""
        try:
            with get_transaction() as conn:
                owner = conn.execute(
                    text("SELECT user_id FROM orders WHERE id = :order_id"),
                    {'order_id': int(order_id)}
                ).scalar()

                if owner is None:
                    return False, "Order not found"

                if not self.access.can_delete_order(owner):
                    logger.warning(f"User {self.access.user_id} tried to delete order {order_id} of {owner}")
                    return False, "You can only delete your own orders"

                conn.execute(
                    text("DELETE FROM order_custom_values WHERE order_id = :order_id"),
                    {'order_id': int(order_id)}
                )
                conn.execute(
                    text("DELETE FROM orders WHERE id = :order_id"),
                    {'order_id': int(order_id)}
                )

            logger.info(f"Order {order_id} deleted by {self.access.user_id}")
            return True, "Order deleted successfully"

        except Exception as e:
            logger.error(f"Error deleting order {order_id}: {e}")
            return False, "Could not delete the order"


# =============================================================================
# SETTINGS (METRICS + CUSTOM FIELDS)
# =============================================================================

class SettingsQueries(_BaseQueries):
    """Ranking metric weights and custom field definitions."""

    def get_metrics(self) -> pd.DataFrame:
        return self._read_df("""
            SELECT id, metric_name, weight
            FROM ranking_metrics
            ORDER BY id
        """)

    def update_metric_weight(self, metric_id: int, weight: Any) -> Tuple[bool, str]:
        """Set a metric weight (percentage between 0 and 100)."""
        try:
            value = Decimal(str(weight).strip())
        except (InvalidOperation, AttributeError):
            return False, "Weight must be a number"

        if not value.is_finite() or not MIN_METRIC_WEIGHT <= value <= MAX_METRIC_WEIGHT:
            return False, f"Weight must be between {MIN_METRIC_WEIGHT} and {MAX_METRIC_WEIGHT}"

        try:
            with get_transaction() as conn:
                result = conn.execute(
                    text("""
                        UPDATE ranking_metrics
                        SET weight = :weight, updated_at = :now
                        WHERE id = :metric_id
                    """),
                    {'weight': str(value), 'now': datetime.now(), 'metric_id': int(metric_id)}
                )
                updated = result.rowcount

            if updated:
                logger.info(f"Metric {metric_id} weight set to {value}")
                return True, "Metric updated successfully"
            return False, "Metric not found"

        except Exception as e:
            logger.error(f"Error updating metric {metric_id}: {e}")
            return False, "Could not update the metric"

    def get_custom_fields(self, active_only: bool = False) -> pd.DataFrame:
        query = "SELECT id, name, type, options, is_active FROM custom_fields"
        params = {}
        if active_only:
            query += " WHERE is_active = :active"
            params['active'] = True
        query += " ORDER BY id"
        return self._read_df(query, params)

    def create_custom_field(self, name: str, kind: str, options_input: Any = None) -> Tuple[bool, str]:
        """Add a field to the order form; dropdowns need at least one option."""
        name = (name or '').strip()
        if not name:
            return False, "Field name is required"

        try:
            kind = FieldKind(str(kind).upper())
        except ValueError:
            return False, f"Unknown field type: {kind}"

        options = None
        if kind is FieldKind.DROPDOWN:
            parsed = parse_options(options_input)
            if not parsed:
                return False, "A list field needs at least one option"
            options = encode_options(parsed)

        now = datetime.now()
        try:
            with get_transaction() as conn:
                conn.execute(
                    text("""
                        INSERT INTO custom_fields (name, type, options, is_active, created_at, updated_at)
                        VALUES (:name, :type, :options, :active, :now, :now)
                    """),
                    {'name': name, 'type': kind.value, 'options': options, 'active': True, 'now': now}
                )
            logger.info(f"Custom field created: {name} ({kind.value})")
            return True, "Field created successfully"

        except Exception as e:
            logger.error(f"Error creating custom field {name}: {e}")
            return False, "Could not create the field"

    def delete_custom_field(self, field_id: int) -> Tuple[bool, str]:
        try:
            with get_transaction() as conn:
                conn.execute(
                    text("DELETE FROM order_custom_values WHERE field_id = :field_id"),
                    {'field_id': int(field_id)}
                )
                deleted = conn.execute(
                    text("DELETE FROM custom_fields WHERE id = :field_id"),
                    {'field_id': int(field_id)}
                ).rowcount

            if deleted:
                logger.info(f"Custom field {field_id} deleted")
                return True, "Field deleted successfully"
            return False, "Field not found"

        except Exception as e:
            logger.error(f"Error deleting custom field {field_id}: {e}")
            return False, "Could not delete the field"


# =============================================================================
# USERS
# =============================================================================

class UserQueries(_BaseQueries):
    """Profiles: roster for the ranking and admin user management."""

    def get_users(self) -> pd.DataFrame:
        return self._read_df("""
            SELECT id, email, name, role, created_at
            FROM profiles
            ORDER BY COALESCE(name, email)
        """)

    def get_operators(self, include_admins: bool = False) -> pd.DataFrame:
        """Ranking roster: operators, plus admins when configured."""
        query = "SELECT id, name, email, role FROM profiles"
        params = {}
        if not include_admins:
            query += " WHERE role <> :admin_role"
            params['admin_role'] = ADMIN_ROLE
        query += " ORDER BY COALESCE(name, email)"
        return self._read_df(query, params)

    def set_role(self, user_id: Any, role: str, acting_user_id: Any) -> Tuple[bool, str]:
        """Promote to admin or demote to operator."""
        if role not in AVAILABLE_ROLES:
            return False, f"Unknown role: {role}"

        if str(user_id) == str(acting_user_id) and role != ADMIN_ROLE:
            return False, "You cannot demote your own account"

        try:
            with get_transaction() as conn:
                updated = conn.execute(
                    text("""
                        UPDATE profiles
                        SET role = :role, updated_at = :now
                        WHERE id = :user_id
                    """),
                    {'role': role, 'now': datetime.now(), 'user_id': str(user_id)}
                ).rowcount

            if updated:
                logger.info(f"User {user_id} role set to {role} by {acting_user_id}")
                return True, "Role updated"
            return False, "User not found"

        except Exception as e:
            logger.error(f"Error updating role for {user_id}: {e}")
            return False, "Could not update the role"

    def email_exists(self, email: str) -> bool:
        df = self._read_df(
            "SELECT COUNT(*) AS cnt FROM profiles WHERE LOWER(email) = :email",
            {'email': email.strip().lower()}
        )
        return bool(not df.empty and int(df.iloc[0]['cnt']) > 0)

    def create_operator(self, email: str, name: str, auth_admin, domain: str = None) -> Tuple[bool, str]:
        """
        Invite an operator through Supabase Auth and create their profile.

        Args:
            email: Company email
            name: Display name (derived from the email when blank)
            auth_admin: Supabase admin auth API (client.auth.admin)
            domain: Company email domain; defaults to the configured one
        """
        email = (email or '').strip().lower()
        name = (name or '').strip() or name_from_email(email)

        if not email or not name:
            return False, "Email and name are required"

        if not is_company_email(email, domain):
            return False, "The email must belong to the company domain"

        if self.email_exists(email):
            return False, "A user with this email already exists"

        try:
            response = auth_admin.invite_user_by_email(email, {'data': {'name': name}})
            user_id = str(response.user.id)
        except Exception as e:
            logger.error(f"Supabase invite failed for {email}: {e}")
            return False, "Could not invite the operator"

        now = datetime.now()
        try:
            with get_transaction() as conn:
                conn.execute(
                    text("""
                        INSERT INTO profiles (id, email, name, role, created_at, updated_at)
                        VALUES (:id, :email, :name, :role, :now, :now)
                    """),
                    {'id': user_id, 'email': email, 'name': name, 'role': OPERATOR_ROLE, 'now': now}
                )
            logger.info(f"Operator created: {email} ({user_id})")
            return True, "Operator created successfully"

        except Exception as e:
            logger.error(f"Error creating profile for {email}: {e}")
            return False, "Operator invited, but the profile could not be saved"


# =============================================================================
# RANKING SNAPSHOT
# =============================================================================

class RankingQueries(_BaseQueries):
    """
    Everything compute_ranking needs for one period, read in one go.

    Unlike the other readers, failures propagate so the page can show a
    "data unavailable" state instead of an empty ranking.

    Usage:
        orders, metrics, operators = RankingQueries().load_snapshot(2025, 3)
        ranked = compute_ranking(orders, metrics, operators)
    """

    def get_period_orders(self, year: int, month: int) -> pd.DataFrame:
        start, end = period_bounds(year, month)
        return self._read_df(
            """
            SELECT id, user_id, client_code, product, volume, revenue, created_at
            FROM orders
            WHERE created_at >= :start AND created_at < :end
            """,
            {'start': start, 'end': end},
            raise_errors=True
        )

    def load_snapshot(
        self,
        year: int,
        month: int,
        include_admins: bool = False
    ) -> Tuple[List[Order], List[Metric], List[Operator]]:
        orders_df = self.get_period_orders(year, month)
        metrics_df = self._read_df(
            "SELECT id, metric_name, weight FROM ranking_metrics ORDER BY id",
            raise_errors=True
        )

        roster_query = "SELECT id, name, email, role FROM profiles"
        params = {}
        if not include_admins:
            roster_query += " WHERE role <> :admin_role"
            params['admin_role'] = ADMIN_ROLE
        operators_df = self._read_df(roster_query, params, raise_errors=True)

        logger.info(
            f"📊 Ranking snapshot {year}-{month:02d}: {len(orders_df)} orders, "
            f"{len(metrics_df)} metrics, {len(operators_df)} operators"
        )
        return (
            orders_from_frame(orders_df),
            metrics_from_frame(metrics_df),
            operators_from_frame(operators_df),
        )
