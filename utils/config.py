# utils/config.py
"""
Centralized Configuration Management

Version: 1.0.0
Features:
- Support both local (.env) and Streamlit Cloud (secrets.toml)
- Singleton pattern for efficiency
- Type-safe getters with defaults
- Environment detection
"""

import os
import logging
from pathlib import Path
from dotenv import load_dotenv
from typing import Dict, Any, Optional
from dataclasses import dataclass

# Initialize logger
logger = logging.getLogger(__name__)


def is_running_on_streamlit_cloud() -> bool:
    """Detect if running on Streamlit Cloud"""
    try:
        import streamlit as st
        return hasattr(st, 'secrets') and len(st.secrets) > 0
    except Exception:
        return False


def _as_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class DatabaseConfig:
    """Supabase Postgres connection settings"""
    host: str
    port: int
    user: str
    password: str
    database: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'host': self.host,
            'port': self.port,
            'user': self.user,
            'password': self.password,
            'database': self.database
        }


@dataclass
class SupabaseConfig:
    """Supabase project settings"""
    url: Optional[str] = None
    anon_key: Optional[str] = None
    service_key: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'url': self.url,
            'anon_key': self.anon_key,
            'service_key': self.service_key,
        }

    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key)


class Config:
    """
    Centralized configuration management

    Usage:
        from utils.config import config

        db_config = config.get_db_config()
        supabase_config = config.get_supabase_config()

        timeout = config.get_app_setting("SESSION_TIMEOUT_HOURS", 8)

        if config.is_feature_enabled("DEBUG_MODE"):
            ...
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.is_cloud = is_running_on_streamlit_cloud()
        self._load_config()
        self._initialized = True

    def _load_config(self):
        """Load configuration based on environment"""
        if self.is_cloud:
            self._load_cloud_config()
        else:
            self._load_local_config()

        self._load_app_config()
        self._log_config_status()

    def _load_cloud_config(self):
        """Load configuration from Streamlit Cloud secrets"""
        import streamlit as st

        db_secrets = st.secrets.get("DB_CONFIG", {})
        self._db_config = DatabaseConfig(
            host=db_secrets.get("host", ""),
            port=int(db_secrets.get("port", 5432)),
            user=db_secrets.get("user", ""),
            password=db_secrets.get("password", ""),
            database=db_secrets.get("database", "postgres")
        )

        supabase_secrets = st.secrets.get("SUPABASE", {})
        self._supabase_config = SupabaseConfig(
            url=supabase_secrets.get("URL"),
            anon_key=supabase_secrets.get("ANON_KEY"),
            service_key=supabase_secrets.get("SERVICE_KEY")
        )

        # App settings read from secrets are exported to the environment so
        # _load_app_config works the same in both modes
        for key, value in dict(st.secrets.get("APP", {})).items():
            os.environ.setdefault(key, str(value))

        logger.info("☁️ Running in STREAMLIT CLOUD")

    def _load_local_config(self):
        """Load configuration from local .env file"""
        env_paths = [
            Path.cwd() / ".env",
            Path(__file__).parent.parent / ".env",
        ]

        for env_path in env_paths:
            if env_path.exists():
                load_dotenv(env_path)
                logger.info(f"Loaded .env from: {env_path}")
                break

        self._db_config = DatabaseConfig(
            host=os.getenv("DB_HOST", ""),
            port=int(os.getenv("DB_PORT", "5432")),
            user=os.getenv("DB_USER", ""),
            password=os.getenv("DB_PASSWORD", ""),
            database=os.getenv("DB_NAME", "postgres")
        )

        if not all([self._db_config.host, self._db_config.user, self._db_config.password]):
            logger.error("Missing required database configuration")
            raise ValueError("Missing required database configuration. Please check .env file.")

        self._supabase_config = SupabaseConfig(
            url=os.getenv("SUPABASE_URL"),
            anon_key=os.getenv("SUPABASE_ANON_KEY"),
            service_key=os.getenv("SUPABASE_SERVICE_KEY")
        )

        logger.info("💻 Running in LOCAL environment")

    def _load_app_config(self):
        """Load application-specific settings"""
        self._app_config = {
            # Session
            "SESSION_TIMEOUT_HOURS": int(os.getenv("SESSION_TIMEOUT_HOURS", "8")),

            # Business rules
            "COMPANY_EMAIL_DOMAIN": os.getenv("COMPANY_EMAIL_DOMAIN", "investsmart.com.br"),
            "RANKING_INCLUDE_ADMINS": _as_bool(os.getenv("RANKING_INCLUDE_ADMINS"), False),
            "LOOKBACK_YEARS": int(os.getenv("LOOKBACK_YEARS", "5")),

            # Database pool
            "DB_POOL_SIZE": int(os.getenv("DB_POOL_SIZE", "5")),
            "DB_POOL_RECYCLE": int(os.getenv("DB_POOL_RECYCLE", "1800")),

            # Cache
            "CACHE_TTL_SECONDS": int(os.getenv("CACHE_TTL_SECONDS", "60")),

            # Feature flags
            "ENABLE_DEBUG_MODE": _as_bool(os.getenv("ENABLE_DEBUG_MODE"), False),
        }

    def _log_config_status(self):
        """Log configuration status"""
        logger.info(f"✅ Database: {self._db_config.host}/{self._db_config.database}")
        logger.info(f"✅ Supabase: {'Configured' if self._supabase_config.is_configured() else 'Not configured'}")

    # ==================== PUBLIC GETTERS ====================

    def get_db_config(self) -> Dict[str, Any]:
        """Get database configuration as dictionary"""
        return self._db_config.to_dict()

    def get_supabase_config(self) -> Dict[str, Any]:
        """Get Supabase project configuration as dictionary"""
        return self._supabase_config.to_dict()

    def get_app_setting(self, key: str, default: Any = None) -> Any:
        """Get application setting with default"""
        return self._app_config.get(key, default)

    def is_feature_enabled(self, feature: str) -> bool:
        """Check if feature is enabled"""
        key = f"ENABLE_{feature.upper()}"
        return self._app_config.get(key, False)

    # ==================== PROPERTIES ====================

    @property
    def app_config(self) -> Dict[str, Any]:
        return self._app_config.copy()


# ==================== SINGLETON INSTANCE ====================

config = Config()

__all__ = [
    'config',
    'Config',
]
