"""Donut chart of category totals for one month."""

import datetime as dt
from collections.abc import Sequence
from decimal import Decimal

import plotly.graph_objects as go

from expense_tracker.models.expense import CategoryTotal, ExpenseCategory
from expense_tracker.views.table import format_currency


CATEGORY_COLORS = {
    ExpenseCategory.FOOD: "#e76e50",
    ExpenseCategory.DAILY: "#2a9d90",
    ExpenseCategory.TRANSPORTATION: "#274754",
    ExpenseCategory.RECREATION: "#e8c468",
}

DONUT_HOLE = 0.6


def build_donut_chart(
    category_totals: Sequence[CategoryTotal],
    total_amount: Decimal,
    period: dt.date,
    currency: str = "USD",
) -> go.Figure:
    """
    Donut chart with the month's total in the middle.

    An empty month still renders: the ring is simply absent and the
    centre shows a zero total.
    """
    labels = [item.category.label for item in category_totals]
    values = [float(item.total) for item in category_totals]
    colors = [CATEGORY_COLORS[item.category] for item in category_totals]

    figure = go.Figure(
        data=[
            go.Pie(
                labels=labels,
                values=values,
                hole=DONUT_HOLE,
                sort=False,
                marker={"colors": colors},
                textinfo="percent",
                hovertemplate="%{label}: %{value:,.2f}<extra></extra>",
            )
        ]
    )
    figure.update_layout(
        title={"text": f"Expenses for {period.strftime('%B %Y')}"},
        showlegend=True,
        margin={"t": 60, "b": 20, "l": 20, "r": 20},
        annotations=[
            {
                "text": f"{format_currency(total_amount, currency)}<br>Total",
                "x": 0.5,
                "y": 0.5,
                "showarrow": False,
                "font": {"size": 20},
            }
        ],
    )
    return figure
