# utils/order_ranking/charts.py
"""
Altair visualizations for the ranking page.
"""

import logging
from typing import Any, Optional

import altair as alt
import pandas as pd

from .constants import CHART_HEIGHT_PER_ROW, CHART_MIN_HEIGHT, COLORS

logger = logging.getLogger(__name__)


class RankingCharts:

    @staticmethod
    def build_score_chart(
        ranking_df: pd.DataFrame,
        current_user_id: Any = None,
        top_n: Optional[int] = 15
    ) -> alt.Chart:
        """
        Horizontal score bars, best first; the signed-in operator is highlighted.

        Args:
            ranking_df: Output of ranking_to_dataframe
            current_user_id: Operator to highlight
            top_n: Limit to the first N positions (None = all)
        """
        if ranking_df.empty:
            return alt.Chart(pd.DataFrame({'score': []})).mark_bar()

        df = ranking_df.sort_values('position')
        if top_n:
            df = df.head(top_n)
        df = df.assign(
            is_current=df['operator_id'].astype(str) == str(current_user_id),
            label=df['position'].map(lambda p: f"#{p}") + " " + df['operator_name'],
        )

        height = max(CHART_MIN_HEIGHT, CHART_HEIGHT_PER_ROW * len(df))

        bars = alt.Chart(df).mark_bar().encode(
            y=alt.Y('label:N', sort=alt.EncodingSortField(field='position', order='ascending'), title=''),
            x=alt.X('score:Q', title='Score'),
            color=alt.condition(
                alt.datum.is_current,
                alt.value(COLORS['current_user']),
                alt.value(COLORS['score'])
            ),
            tooltip=[
                alt.Tooltip('operator_name:N', title='Operator'),
                alt.Tooltip('total_revenue:Q', title='Revenue (R$)', format=',.2f'),
                alt.Tooltip('order_count:Q', title='Orders'),
                alt.Tooltip('score:Q', title='Score', format='.2f'),
            ]
        )

        text = alt.Chart(df).mark_text(align='left', dx=3).encode(
            y=alt.Y('label:N', sort=alt.EncodingSortField(field='position', order='ascending')),
            x=alt.X('score:Q'),
            text=alt.Text('score:Q', format='.2f'),
            color=alt.value(COLORS['text_dark'])
        )

        return alt.layer(bars, text).properties(height=height)
