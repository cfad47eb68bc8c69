# utils/order_ranking/export.py
"""
Order and Ranking Exports

- Orders CSV for a month/year (admin export tab)
- Formatted Excel ranking report (openpyxl) with a summary header,
  conditional highlight of the podium and BRL number formats
"""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from io import BytesIO
from typing import Optional, Sequence

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from .constants import COLORS, EXCEL_STYLES, ORDER_EXPORT_COLUMNS
from .models import CENT, RankedEntry

logger = logging.getLogger(__name__)


def export_file_name(year: int, month: int, extension: str = "csv") -> str:
    return f"orders_{int(year)}_{int(month):02d}.{extension}"


def _money_cell(value) -> str:
    """Stored amount with two decimals; blank when it is not a finite number."""
    if value is None or isinstance(value, bool):
        return ""
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return ""
    if not amount.is_finite():
        return ""
    return f"{amount.quantize(CENT, rounding=ROUND_HALF_UP)}"


def orders_to_csv(orders_df: pd.DataFrame) -> str:
    """
    Render orders as CSV with human-readable headers.

    Columns: ID, Operator, Client, Product, Volume, Revenue, Created At
    """
    columns = list(ORDER_EXPORT_COLUMNS)
    if orders_df is None or orders_df.empty:
        return pd.DataFrame(columns=list(ORDER_EXPORT_COLUMNS.values())).to_csv(index=False)

    df = orders_df.reindex(columns=columns).copy()
    for money_column in ['volume', 'revenue']:
        df[money_column] = df[money_column].map(_money_cell)
    df['created_at'] = pd.to_datetime(df['created_at'], errors='coerce').dt.strftime('%Y-%m-%d %H:%M:%S')

    df = df.rename(columns=ORDER_EXPORT_COLUMNS)
    logger.info(f"📥 Exporting {len(df)} orders to CSV")
    return df.to_csv(index=False)


class RankingExport:
    """
    Excel report generator for a ranking.

    Usage:
        exporter = RankingExport()
        excel_bytes = exporter.create_report(ranked, period_label="March 2025")

        st.download_button(
            label="Download Report",
            data=excel_bytes,
            file_name="ranking_2025_03.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
    """

    HEADERS = ['Position', 'Operator', 'Revenue', 'Orders', 'Score']

    def __init__(self):
        self.wb = None
        self._init_styles()

    def _init_styles(self):
        self.header_fill = PatternFill(
            start_color=EXCEL_STYLES['header_fill_color'],
            end_color=EXCEL_STYLES['header_fill_color'],
            fill_type='solid'
        )
        self.header_font = Font(bold=True, color=EXCEL_STYLES['header_font_color'], size=11)
        self.title_font = Font(bold=True, size=16)
        self.podium_fills = {
            position: PatternFill(
                start_color=COLORS[medal].lstrip("#"),
                end_color=COLORS[medal].lstrip("#"),
                fill_type="solid"
            )
            for position, medal in [(1, "gold"), (2, "silver"), (3, "bronze")]
        }

        thin = Side(style='thin', color='000000')
        self.cell_border = Border(left=thin, right=thin, top=thin, bottom=thin)
        self.center_align = Alignment(horizontal='center', vertical='center')

    def create_report(
        self,
        ranked: Sequence[RankedEntry],
        period_label: str,
        generated_by: Optional[str] = None
    ) -> BytesIO:
        """
        Build the workbook.

        Args:
            ranked: Output of compute_ranking
            period_label: e.g. "March 2025"
            generated_by: Name shown in the header

        Returns:
            BytesIO containing the xlsx file
        """
        self.wb = Workbook()
        ws = self.wb.active
        ws.title = "Ranking"

        ws['A1'] = f"Ranking - {period_label}"
        ws['A1'].font = self.title_font
        ws['A2'] = f"Generated {datetime.now().strftime('%Y-%m-%d %H:%M')}"
        if generated_by:
            ws['A2'] = f"{ws['A2'].value} by {generated_by}"

        header_row = 4
        for col, header in enumerate(self.HEADERS, start=1):
            cell = ws.cell(row=header_row, column=col, value=header)
            cell.fill = self.header_fill
            cell.font = self.header_font
            cell.border = self.cell_border
            cell.alignment = self.center_align

        for offset, entry in enumerate(ranked, start=1):
            row = header_row + offset
            values = [
                entry.position,
                entry.operator_name,
                float(entry.total_revenue),
                entry.order_count,
                float(entry.score),
            ]
            for col, value in enumerate(values, start=1):
                cell = ws.cell(row=row, column=col, value=value)
                cell.border = self.cell_border
                if entry.position in self.podium_fills:
                    cell.fill = self.podium_fills[entry.position]

            ws.cell(row=row, column=3).number_format = EXCEL_STYLES['currency_format']
            ws.cell(row=row, column=5).number_format = EXCEL_STYLES['score_format']

        for col, width in enumerate([10, 32, 18, 10, 14], start=1):
            ws.column_dimensions[get_column_letter(col)].width = width
        ws.freeze_panes = ws.cell(row=header_row + 1, column=1)

        output = BytesIO()
        self.wb.save(output)
        output.seek(0)

        logger.info(f"📊 Ranking report created: {len(ranked)} rows ({period_label})")
        return output
