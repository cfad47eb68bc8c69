# utils/supabase_client.py
"""
Supabase client factory.

- create_supabase_client(): one client per browser session (anon key);
  it holds that user's auth session
- get_admin_client(): process-wide service-role client for admin-only
  auth operations such as inviting operators
"""

import logging
import threading

from supabase import Client, create_client

from .config import config

logger = logging.getLogger(__name__)

_admin_client = None
_admin_lock = threading.Lock()


def create_supabase_client() -> Client:
    """Create a Supabase client authenticated with the anon key."""
    settings = config.get_supabase_config()
    if not settings['url'] or not settings['anon_key']:
        raise ValueError(
            "Supabase credentials not configured. "
            "Set SUPABASE_URL and SUPABASE_ANON_KEY environment variables."
        )
    return create_client(settings['url'], settings['anon_key'])


def get_admin_client() -> Client:
    """Get or create the service-role Supabase client (singleton)."""
    global _admin_client

    if _admin_client is None:
        with _admin_lock:
            if _admin_client is None:
                settings = config.get_supabase_config()
                if not settings['url'] or not settings['service_key']:
                    raise ValueError(
                        "Supabase service key not configured. "
                        "Set SUPABASE_URL and SUPABASE_SERVICE_KEY environment variables."
                    )
                _admin_client = create_client(settings['url'], settings['service_key'])
                logger.info("🔑 Supabase admin client created")

    return _admin_client


__all__ = [
    'create_supabase_client',
    'get_admin_client',
]
