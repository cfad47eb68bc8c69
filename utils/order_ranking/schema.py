# utils/order_ranking/schema.py
"""
Table definitions for the order ranking app.

The tables live in the Supabase Postgres database next to auth.users;
profiles.id holds the Supabase auth user id. Queries elsewhere are plain
SQL text; this metadata exists to create the schema on a fresh database.
"""

import logging
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    text,
)

from .constants import DEFAULT_METRIC_WEIGHTS

logger = logging.getLogger(__name__)

metadata = MetaData()

profiles = Table(
    "profiles", metadata,
    Column("id", String(36), primary_key=True),
    Column("email", String(255), unique=True),
    Column("name", String(255)),
    Column("role", String(20), nullable=False, default="user"),
    Column("created_at", DateTime, default=datetime.now),
    Column("updated_at", DateTime, default=datetime.now),
)

orders = Table(
    "orders", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", String(36), ForeignKey("profiles.id"), nullable=False, index=True),
    Column("client_code", String(50), nullable=False),
    Column("product", String(100), nullable=False),
    Column("volume", Numeric(14, 2), nullable=False),
    Column("revenue", Numeric(14, 2), nullable=False),
    Column("created_at", DateTime, nullable=False, index=True),
    Column("updated_at", DateTime),
)

custom_fields = Table(
    "custom_fields", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
    Column("type", String(20), nullable=False),
    Column("options", Text),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime),
    Column("updated_at", DateTime),
)

order_custom_values = Table(
    "order_custom_values", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("order_id", Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("field_id", Integer, ForeignKey("custom_fields.id", ondelete="CASCADE"), nullable=False),
    Column("value", Text),
)

ranking_metrics = Table(
    "ranking_metrics", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("metric_name", String(50), nullable=False, unique=True),
    Column("weight", Numeric(5, 2), nullable=False, default=0),
    Column("updated_at", DateTime),
)


def create_tables(engine):
    """Create any missing tables."""
    metadata.create_all(engine)
    logger.info(f"✅ Schema ready: {', '.join(sorted(metadata.tables))}")


def seed_default_metrics(engine) -> int:
    """
    Insert the default ranking metrics that are not configured yet.

    Returns:
        Number of metrics inserted
    """
    inserted = 0
    with engine.begin() as conn:
        existing = {
            row[0] for row in conn.execute(text("SELECT metric_name FROM ranking_metrics"))
        }
        for name, weight in DEFAULT_METRIC_WEIGHTS.items():
            if name in existing:
                continue
            conn.execute(
                text("""
                    INSERT INTO ranking_metrics (metric_name, weight, updated_at)
                    VALUES (:name, :weight, :now)
                """),
                {'name': name, 'weight': weight, 'now': datetime.now()}
            )
            inserted += 1

    if inserted:
        logger.info(f"🌱 Seeded {inserted} default ranking metric(s)")
    return inserted
