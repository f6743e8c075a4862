"""Budget aggregation and month helpers."""

from src.budgets.aggregator import (
    BudgetAggregator,
    filter_by_month,
    group_by_label,
    net_income,
    percentage,
    sum_amounts,
    total_for_month,
    usage_color,
)
from src.budgets.months import (
    InvalidMonthError,
    current_month,
    is_in_month,
    month_bounds,
    month_display_name,
    month_key,
    parse_month,
    recent_months,
    shift_month,
)

__all__ = [
    "BudgetAggregator",
    "InvalidMonthError",
    "current_month",
    "filter_by_month",
    "group_by_label",
    "is_in_month",
    "month_bounds",
    "month_display_name",
    "month_key",
    "net_income",
    "parse_month",
    "percentage",
    "recent_months",
    "shift_month",
    "sum_amounts",
    "total_for_month",
    "usage_color",
]
