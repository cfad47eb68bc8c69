# utils/order_ranking/filters.py
"""
Period Filter Components

Month/year selectors shared by the ranking page, the order list and the
admin export tab.
"""

import logging
from datetime import date
from typing import Tuple

import streamlit as st

from utils.config import config
from .constants import MONTH_NAMES
from .periods import year_options

logger = logging.getLogger(__name__)


class PeriodFilter:
    """
    Usage:
        year, month = PeriodFilter().render(key="ranking")
    """

    def __init__(self, lookback_years: int = None):
        if lookback_years is None:
            lookback_years = config.get_app_setting("LOOKBACK_YEARS", 5)
        self.years = year_options(lookback_years)

    def render(self, key: str, container=None) -> Tuple[int, int]:
        """Render month and year selectors defaulting to the current month."""
        target = container if container is not None else st
        today = date.today()

        col_month, col_year = target.columns(2)
        with col_month:
            month = st.selectbox(
                "Month",
                options=list(MONTH_NAMES),
                index=today.month - 1,
                format_func=lambda m: MONTH_NAMES[m],
                key=f"{key}_month"
            )
        with col_year:
            year = st.selectbox(
                "Year",
                options=self.years,
                index=0,
                key=f"{key}_year"
            )

        logger.debug(f"Period selected ({key}): {year}-{month:02d}")
        return int(year), int(month)
