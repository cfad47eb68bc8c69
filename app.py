# app.py
"""
Order Ranking - Main Entry Point

Version: 1.0.0
"""

import streamlit as st
from utils.auth import AuthManager
from utils.config import config
from utils.db import check_db_connection
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ==================== PAGE CONFIGURATION ====================

APP_NAME = "Order Ranking"
APP_ICON = "🏆"
APP_VERSION = "1.0.0"

st.set_page_config(
    page_title=APP_NAME,
    page_icon=APP_ICON,
    layout="wide",
    initial_sidebar_state="expanded"
)

# ==================== CUSTOM CSS ====================

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        margin-bottom: 0.5rem;
        color: #1f77b4;
    }

    .sub-header {
        font-size: 1.1rem;
        color: #666;
        margin-bottom: 2rem;
    }

    .welcome-box {
        background: linear-gradient(135deg, #1f77b4 0%, #2196f3 100%);
        color: white;
        padding: 2rem;
        border-radius: 0.75rem;
        margin-bottom: 2rem;
    }

    .welcome-title {
        font-size: 1.75rem;
        font-weight: 600;
        margin-bottom: 0.5rem;
    }

    .info-card {
        background: #f8f9fa;
        padding: 1.5rem;
        border-radius: 0.5rem;
        border-left: 4px solid #1f77b4;
        margin-bottom: 1rem;
    }

    .footer {
        text-align: center;
        color: #888;
        padding: 1rem;
        margin-top: 3rem;
        border-top: 1px solid #eee;
        font-size: 0.9rem;
    }
</style>
""", unsafe_allow_html=True)

# ==================== INITIALIZATION ====================

auth = AuthManager()

# ==================== HELPER FUNCTIONS ====================

def show_sign_in_form():
    with st.form("login_form", clear_on_submit=False):
        st.markdown("#### 🔐 Sign in")

        email = st.text_input("Email", placeholder="name@company.com", key="login_email")
        password = st.text_input(
            "Password",
            type="password",
            placeholder="Enter your password",
            key="login_password"
        )

        submit = st.form_submit_button("🔑 Sign in", type="primary", use_container_width=True)

        if submit:
            if not email or not password:
                st.warning("Please enter both email and password")
            else:
                with st.spinner("Authenticating..."):
                    success, result = auth.authenticate(email, password)

                if success:
                    auth.login(result)
                    st.success("✅ Login successful!")
                    st.rerun()
                else:
                    st.error(result.get("error", "Authentication failed"))


def show_sign_up_form():
    domain = config.get_app_setting("COMPANY_EMAIL_DOMAIN")

    with st.form("signup_form", clear_on_submit=True):
        st.markdown("#### ✍️ Create account")
        st.caption(f"Only @{domain} addresses can register.")

        email = st.text_input("Email", key="signup_email")
        password = st.text_input("Password", type="password", key="signup_password")
        confirm = st.text_input("Confirm password", type="password", key="signup_confirm")

        if st.form_submit_button("Create account", use_container_width=True):
            if not email or not password:
                st.warning("Please enter both email and password")
            elif password != confirm:
                st.error("Passwords do not match")
            else:
                success, message = auth.sign_up(email, password)
                if success:
                    st.success(message)
                else:
                    st.error(message)


def show_login_page():
    """Display the login page"""
    st.markdown(f'<p class="main-header">{APP_ICON} {APP_NAME}</p>', unsafe_allow_html=True)
    st.markdown('<p class="sub-header">Order registration and monthly operator ranking</p>', unsafe_allow_html=True)

    # Check database connection
    db_ok, db_error = check_db_connection()
    if not db_ok:
        st.error(f"⚠️ {db_error}")
        st.info("Please check your network connection or contact IT support.")
        return

    col1, col2, col3 = st.columns([1, 2, 1])

    with col2:
        tab_sign_in, tab_sign_up = st.tabs(["Sign in", "Create account"])
        with tab_sign_in:
            show_sign_in_form()
        with tab_sign_up:
            show_sign_up_form()


def show_main_app():
    """Display the main application after login"""

    with st.sidebar:
        st.markdown(f"### 👤 {auth.get_user_display_name()}")

        if auth.is_admin():
            st.success("🔓 Administrator")
        else:
            st.info("👤 Operator")

        st.caption(st.session_state.get('user_email', ''))
        st.markdown("---")

        if st.button("🚪 Logout", use_container_width=True):
            auth.logout()
            st.rerun()

    st.markdown(f"""
    <div class="welcome-box">
        <div class="welcome-title">Welcome, {auth.get_user_display_name()}! 👋</div>
        <div>Select a page from the sidebar menu to get started.</div>
    </div>
    """, unsafe_allow_html=True)

    st.markdown("### 📌 Pages")

    st.markdown("""
    <div class="info-card">
        <strong>📝 Order Form</strong><br>
        <span style="color: #666;">Register client orders and review your own history.</span>
    </div>
    <div class="info-card">
        <strong>🏆 Ranking</strong><br>
        <span style="color: #666;">Monthly operator ranking weighted by revenue and number of orders.</span>
    </div>
    """, unsafe_allow_html=True)

    if auth.is_admin():
        st.markdown("""
        <div class="info-card">
            <strong>⚙️ Admin</strong><br>
            <span style="color: #666;">Users, custom fields, ranking weights and CSV export.</span>
        </div>
        <div class="info-card">
            <strong>📋 All Orders</strong><br>
            <span style="color: #666;">Search and manage every operator's orders.</span>
        </div>
        """, unsafe_allow_html=True)

        st.markdown("---")
        with st.expander("🔧 System Status (Admin Only)"):
            from utils.db import get_connection_pool_status
            pool_status = get_connection_pool_status()

            col1, col2, col3 = st.columns(3)
            with col1:
                st.metric("DB Status", pool_status.get("status", "OK"))
            with col2:
                st.metric("Connections Used", pool_status.get("checked_out", 0))
            with col3:
                st.metric("Available", pool_status.get("checked_in", 0))

            if st.button("🛠️ Create missing tables and default metrics"):
                from utils.db import get_db_engine
                from utils.order_ranking.schema import create_tables, seed_default_metrics
                try:
                    engine = get_db_engine()
                    create_tables(engine)
                    seeded = seed_default_metrics(engine)
                    st.success(f"✅ Schema ready ({seeded} metric(s) seeded)")
                except Exception as e:
                    logger.error(f"Schema setup failed: {e}")
                    st.error(f"❌ Schema setup failed: {e}")

            auth_session = st.session_state.get('auth_session')
            if auth_session is not None:
                st.caption(f"Auth listener active: {auth_session.is_subscribed} | last event: {auth_session.last_event or '-'}")

    st.markdown(f"""
    <div class="footer">
        <strong>{APP_NAME}</strong> v{APP_VERSION}
    </div>
    """, unsafe_allow_html=True)


# ==================== MAIN ====================

def main():
    """Main application entry point"""
    if not auth.check_session():
        show_login_page()
    else:
        show_main_app()


if __name__ == "__main__":
    main()
