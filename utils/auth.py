# utils/auth.py
"""
Authentication Manager for Streamlit Apps

Version: 1.0.0
Features:
- Supabase Auth email/password sign-in (credentials never touch our tables)
- Profile fetch-or-create in the profiles table
- Auth state container subscribed to Supabase auth events
- Role-based access control
- Session management with timeout
"""

import streamlit as st
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, Tuple, List
import logging
from .db import execute_query, execute_update
from .config import config
from .supabase_client import create_supabase_client

logger = logging.getLogger(__name__)

DEFAULT_ROLE = 'user'

SESSION_KEYS = [
    'authenticated', 'user_id', 'user_email', 'user_role',
    'user_fullname', 'login_time', 'auth_session', 'debug_mode'
]


# ==================== EMAIL HELPERS ====================

def name_from_email(email: str) -> str:
    """
    Derive a display name from a corporate email address.

    rodrigo.vignoli@investsmart.com.br -> "Rodrigo Vignoli"
    """
    if not email or '@' not in email:
        return email or ''

    local_part = email.split('@')[0]
    parts = [p for p in local_part.split('.') if p]
    if not parts:
        return email
    return ' '.join(p[:1].upper() + p[1:].lower() for p in parts)


def is_company_email(email: str, domain: str = None) -> bool:
    """Check the address belongs to the company domain."""
    if domain is None:
        domain = config.get_app_setting("COMPANY_EMAIL_DOMAIN", "investsmart.com.br")
    if not email or not domain:
        return False
    return email.strip().lower().endswith('@' + domain.lower())


# ==================== AUTH STATE CONTAINER ====================

class AuthSession:
    """
    Mirror of the Supabase auth state for one browser session.

    Lifecycle:
        start()  - read the current session, subscribe to auth events
        (events) - every SIGNED_IN / SIGNED_OUT / TOKEN_REFRESHED / ... event
                   replaces user and session
        close()  - unsubscribe; safe to call more than once

    Usage:
        with AuthSession(client.auth) as auth_state:
            if auth_state.is_authenticated:
                ...
    """

    def __init__(self, auth_client, on_change: Callable[[str, "AuthSession"], None] = None):
        self._auth = auth_client
        self._on_change = on_change
        self._subscription = None
        self._lock = threading.Lock()

        self.user = None
        self.session = None
        self.last_event: Optional[str] = None
        self.error: Optional[str] = None
        self.loading = True

    # ---------- lifecycle ----------

    def start(self) -> "AuthSession":
        if self._subscription is not None:
            return self

        try:
            self._apply(self._auth.get_session())
        except Exception as e:
            self.error = str(e)
            logger.error(f"Could not read current auth session: {e}")
            self._apply(None)

        self._subscription = self._auth.on_auth_state_change(self._handle_event)
        return self

    def close(self):
        with self._lock:
            subscription, self._subscription = self._subscription, None

        if subscription is not None:
            subscription.unsubscribe()
            logger.debug("Auth state subscription released")

    def __enter__(self) -> "AuthSession":
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    @property
    def is_subscribed(self) -> bool:
        return self._subscription is not None

    # ---------- state ----------

    def _apply(self, session, event=None):
        with self._lock:
            if event is not None:
                self.last_event = event
            self.session = session
            self.user = getattr(session, 'user', None) if session else None
            self.loading = False

    def _handle_event(self, event, session):
        name = getattr(event, 'value', event)
        self._apply(session, event=name)
        logger.info(f"Auth event: {name}")

        if self._on_change is not None:
            self._on_change(name, self)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def user_id(self) -> Optional[str]:
        return str(self.user.id) if self.user is not None else None

    @property
    def email(self) -> Optional[str]:
        return getattr(self.user, 'email', None) if self.user is not None else None


# ==================== AUTH MANAGER ====================

class AuthManager:
    """Authentication manager for Streamlit apps"""

    def __init__(self):
        self.session_timeout = timedelta(
            hours=config.get_app_setting("SESSION_TIMEOUT_HOURS", 8)
        )

    # ==================== SUPABASE CLIENT ====================

    def _get_client(self):
        """One Supabase client per browser session"""
        if '_supabase_client' not in st.session_state:
            st.session_state['_supabase_client'] = create_supabase_client()
        return st.session_state['_supabase_client']

    # ==================== PROFILES ====================

    def fetch_or_create_profile(self, user_id: str, email: str) -> Optional[Dict]:
        """
        Load the profile row for an auth user, creating it on first login.

        Returns:
            Profile dict or None on database error
        """
        try:
            rows = execute_query(
                "SELECT id, email, name, role FROM profiles WHERE id = :user_id",
                {'user_id': user_id}
            )
            if rows:
                return rows[0]

            now = datetime.now()
            profile = {
                'id': user_id,
                'email': email,
                'name': name_from_email(email),
                'role': DEFAULT_ROLE,
            }
            execute_update(
                """
                INSERT INTO profiles (id, email, name, role, created_at, updated_at)
                VALUES (:id, :email, :name, :role, :now, :now)
                """,
                {**profile, 'now': now}
            )
            logger.info(f"Profile created for {email}")
            return profile

        except Exception as e:
            logger.error(f"Error fetching/creating profile for {email}: {e}")
            return None

    # ==================== AUTHENTICATION ====================

    def authenticate(self, email: str, password: str) -> Tuple[bool, Optional[Dict]]:
        """
        Authenticate user against Supabase Auth

        Args:
            email: User's email
            password: Plain text password

        Returns:
            Tuple of (success: bool, user_info: dict or error: dict)
        """
        try:
            client = self._get_client()
            response = client.auth.sign_in_with_password({
                'email': email.strip(),
                'password': password,
            })
        except Exception as e:
            logger.warning(f"Sign-in failed for {email}: {e}")
            return False, {"error": "Invalid email or password"}

        user = response.user
        if user is None:
            return False, {"error": "Invalid email or password"}

        profile = self.fetch_or_create_profile(str(user.id), user.email or email)
        if profile is None:
            return False, {"error": "Could not load your profile. Please try again."}

        logger.info(f"User {email} authenticated successfully")

        return True, {
            'id': str(user.id),
            'email': profile.get('email') or user.email,
            'role': profile.get('role') or DEFAULT_ROLE,
            'full_name': profile.get('name') or name_from_email(user.email or email),
            'login_time': datetime.now(),
        }

    def sign_up(self, email: str, password: str) -> Tuple[bool, str]:
        """Register a new account with a company email"""
        if not is_company_email(email):
            domain = config.get_app_setting("COMPANY_EMAIL_DOMAIN")
            return False, f"Use an @{domain} email address"

        try:
            self._get_client().auth.sign_up({'email': email.strip(), 'password': password})
            logger.info(f"Sign-up requested for {email}")
            return True, "Check your inbox to confirm your email"
        except Exception as e:
            logger.error(f"Sign-up error for {email}: {e}")
            return False, str(e)

    # ==================== SESSION MANAGEMENT ====================

    def check_session(self) -> bool:
        """Check if user session is valid and not expired"""
        if not st.session_state.get('authenticated'):
            return False

        auth_session = st.session_state.get('auth_session')
        if auth_session is not None and not auth_session.is_authenticated:
            logger.info(f"Auth session ended for user: {st.session_state.get('user_email')}")
            self.logout()
            return False

        login_time = st.session_state.get('login_time')
        if login_time:
            elapsed = datetime.now() - login_time
            if elapsed > self.session_timeout:
                logger.info(f"Session expired for user: {st.session_state.get('user_email')}")
                self.logout()
                return False

        return True

    def login(self, user_info: Dict):
        """Initialize user session after successful authentication"""
        st.session_state.authenticated = True
        st.session_state.user_id = user_info['id']
        st.session_state.user_email = user_info['email']
        st.session_state.user_role = user_info['role']
        st.session_state.user_fullname = user_info['full_name']
        st.session_state.login_time = user_info['login_time']
        st.session_state.debug_mode = config.is_feature_enabled("DEBUG_MODE")

        st.session_state.auth_session = AuthSession(self._get_client().auth).start()

        logger.info(f"User {user_info['email']} logged in successfully")

    def logout(self):
        """Sign out of Supabase, clear user session and cache"""
        email = st.session_state.get('user_email', 'Unknown')

        client = st.session_state.get('_supabase_client')
        if client is not None:
            try:
                client.auth.sign_out()
            except Exception as e:
                logger.warning(f"Supabase sign-out failed for {email}: {e}")

        auth_session = st.session_state.get('auth_session')
        if auth_session is not None:
            auth_session.close()

        for key in SESSION_KEYS:
            if key in st.session_state:
                del st.session_state[key]

        st.cache_data.clear()

        logger.info(f"User {email} logged out")

    # ==================== ACCESS CONTROL ====================

    def require_auth(self) -> bool:
        """
        Require authentication to access a page
        Use at the beginning of each protected page
        """
        if not self.check_session():
            st.warning("⚠️ Please login to access this page")
            st.stop()
            return False
        return True

    def require_role(self, allowed_roles: List[str]) -> bool:
        """
        Require specific role(s) to access a page

        Usage:
            auth.require_role(['admin'])
        """
        if not self.require_auth():
            return False

        current_role = st.session_state.get('user_role', '')

        if current_role not in allowed_roles:
            st.error("🚫 Access denied. Only administrators can access this page.")
            st.stop()
            return False

        return True

    def has_role(self, role: str) -> bool:
        """Check if current user has specific role"""
        return st.session_state.get('user_role', '') == role

    def is_admin(self) -> bool:
        """Check if current user is admin"""
        return self.has_role('admin')

    # ==================== USER INFO HELPERS ====================

    def get_user_display_name(self) -> str:
        """Get user's display name for UI"""
        if st.session_state.get('user_fullname'):
            return st.session_state.user_fullname
        return st.session_state.get('user_email', 'User')

    def get_user_id(self) -> Optional[str]:
        """Get current user's ID"""
        return st.session_state.get('user_id')


# ==================== MODULE EXPORTS ====================

__all__ = [
    'AuthManager',
    'AuthSession',
    'name_from_email',
    'is_company_email',
]
