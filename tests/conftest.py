"""
Shared fixtures.

The app reads its database settings at import time, so placeholder
credentials are exported before anything under utils is imported. Query
tests run against in-memory SQLite swapped in for the Postgres engine.
"""

import os

os.environ.setdefault("DB_HOST", "localhost")
os.environ.setdefault("DB_USER", "test")
os.environ.setdefault("DB_PASSWORD", "test")
os.environ.setdefault("COMPANY_EMAIL_DOMAIN", "investsmart.com.br")

from datetime import datetime

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

import utils.db as db
from utils.order_ranking.schema import create_tables, seed_default_metrics


@pytest.fixture
def engine(monkeypatch):
    """Fresh in-memory database with the schema and default metrics."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    seed_default_metrics(engine)
    monkeypatch.setattr(db, "_engine", engine)
    yield engine
    engine.dispose()


@pytest.fixture
def add_profile(engine):
    def _add(user_id, email, name=None, role="user"):
        with engine.begin() as conn:
            conn.execute(
                text("""
                    INSERT INTO profiles (id, email, name, role, created_at, updated_at)
                    VALUES (:id, :email, :name, :role, :now, :now)
                """),
                {'id': user_id, 'email': email, 'name': name, 'role': role, 'now': datetime.now()}
            )
        return user_id
    return _add


@pytest.fixture
def add_order(engine):
    def _add(user_id, revenue, created_at, volume="100.00", client_code="C001", product="Fundos"):
        with engine.begin() as conn:
            return conn.execute(
                text("""
                    INSERT INTO orders (user_id, client_code, product, volume, revenue, created_at, updated_at)
                    VALUES (:user_id, :client_code, :product, :volume, :revenue, :created_at, :created_at)
                    RETURNING id
                """),
                {
                    'user_id': user_id,
                    'client_code': client_code,
                    'product': product,
                    'volume': str(volume),
                    'revenue': str(revenue),
                    'created_at': created_at,
                }
            ).scalar()
    return _add


@pytest.fixture
def team(add_profile):
    """One admin and two operators."""
    return {
        'admin': add_profile("admin-1", "boss@investsmart.com.br", "Boss", role="admin"),
        'ana': add_profile("op-ana", "ana.souza@investsmart.com.br", "Ana Souza"),
        'bruno': add_profile("op-bruno", "bruno.lima@investsmart.com.br", "Bruno Lima"),
    }
