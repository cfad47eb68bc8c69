# utils/__init__.py
"""
Shared Utilities Package for Streamlit Apps

This package contains common utilities shared across all pages:
- auth: Authentication and session management (Supabase Auth)
- config: Configuration management (local + Streamlit Cloud)
- db: Pooled Supabase Postgres engine and query helpers
- supabase_client: Supabase client factories

Usage:
    from utils.auth import AuthManager
    from utils.db import check_db_connection, get_transaction
    from utils.config import config
"""

# Authentication
from .auth import (
    AuthManager,
    AuthSession,
)

# Configuration
from .config import (
    config,
    Config,
)

# Database
from .db import (
    get_db_engine,
    check_db_connection,
    get_transaction,
    execute_query,
    execute_update,
    get_connection_pool_status,
)

# Supabase
from .supabase_client import (
    create_supabase_client,
    get_admin_client,
)

__all__ = [
    # Auth
    'AuthManager',
    'AuthSession',

    # Config
    'config',
    'Config',

    # Database
    'get_db_engine',
    'check_db_connection',
    'get_transaction',
    'execute_query',
    'execute_update',
    'get_connection_pool_status',

    # Supabase
    'create_supabase_client',
    'get_admin_client',
]

__version__ = '1.0.0'
