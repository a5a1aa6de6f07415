"""Business valuation and breakeven calculators."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from merraki.errors import wrap


def _div(a: float, b: float) -> float:
    """Divide with IEEE semantics: zero divisors give infinities or NaN."""
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _pow(base: float, exponent: float) -> float:
    try:
        return math.pow(base, exponent)
    except ValueError:
        return math.nan


@dataclass
class ValuationInput:
    revenue_year1: float
    revenue_year2: float
    revenue_year3: float
    revenue_year4: float
    revenue_year5: float
    exit_multiple: float
    discount_rate: float
    industry: str = ""

    @property
    def revenues(self) -> list[float]:
        return [
            self.revenue_year1,
            self.revenue_year2,
            self.revenue_year3,
            self.revenue_year4,
            self.revenue_year5,
        ]


@dataclass
class YearValuation:
    year: int
    revenue: float
    valuation: float
    pv_factor: float
    present_value: float


@dataclass
class ValuationMetrics:
    cagr: float
    avg_growth_rate: float
    recommendation: str


@dataclass
class ChartData:
    labels: list[str]
    revenue: list[float]
    valuation: list[float]


@dataclass
class ValuationOutput:
    exit_valuation: float
    present_value: float
    yearly_breakdown: list[YearValuation]
    chart_data: ChartData
    metrics: ValuationMetrics


@dataclass
class BreakevenInput:
    fixed_costs: float
    variable_cost_per_unit: float
    price_per_unit: float
    months_to_forecast: int


@dataclass
class MonthForecast:
    month: int
    units_sold: int
    revenue: float
    variable_costs: float
    fixed_costs: float
    total_costs: float
    profit: float
    cumulative_profit: float
    is_breakeven: bool


@dataclass
class BreakevenChartData:
    labels: list[str] = field(default_factory=list)
    revenue: list[float] = field(default_factory=list)
    costs: list[float] = field(default_factory=list)
    profit: list[float] = field(default_factory=list)


@dataclass
class BreakevenOutput:
    breakeven_units: int
    breakeven_revenue: float
    breakeven_month: int
    contribution_margin: float
    contribution_margin_percent: float
    monthly_forecast: list[MonthForecast]
    chart_data: BreakevenChartData


def calculate_valuation(input_: ValuationInput) -> ValuationOutput:
    """Value a business from five years of revenue and an exit multiple."""
    revenues = input_.revenues
    multiple = input_.exit_multiple
    exit_valuation = revenues[-1] * multiple

    breakdown = []
    for year, revenue in enumerate(revenues, start=1):
        valuation = revenue * multiple
        pv_factor = _div(1.0, _pow(1 + input_.discount_rate / 100, year))
        breakdown.append(YearValuation(year, revenue, valuation, pv_factor, valuation * pv_factor))
    total_pv = sum(item.present_value for item in breakdown)

    cagr = (_pow(_div(revenues[-1], revenues[0]), 1.0 / 4.0) - 1) * 100
    growths = [_div(cur - prev, prev) * 100 for prev, cur in zip(revenues, revenues[1:])]
    avg_growth_rate = sum(growths) / 4

    if cagr < 20:
        recommendation = "Moderate growth - consider optimization strategies"
    elif cagr > 100:
        recommendation = "Exceptional growth - ensure sustainable scaling"
    else:
        recommendation = "Strong growth trajectory"

    chart = ChartData(
        labels=[f"Year {year}" for year in range(1, 6)],
        revenue=list(revenues),
        valuation=[revenue * multiple for revenue in revenues],
    )
    return ValuationOutput(
        exit_valuation=exit_valuation,
        present_value=total_pv,
        yearly_breakdown=breakdown,
        chart_data=chart,
        metrics=ValuationMetrics(cagr, avg_growth_rate, recommendation),
    )


def _truncated_twelfth(units: int) -> int:
    quotient = abs(units) // 12
    return quotient if units >= 0 else -quotient


def calculate_breakeven(input_: BreakevenInput) -> BreakevenOutput:
    """Find the breakeven point and forecast cumulative profit month by month."""
    if input_.months_to_forecast < 0:
        raise ValueError("months_to_forecast must not be negative")
    margin = input_.price_per_unit - input_.variable_cost_per_unit
    margin_percent = _div(margin, input_.price_per_unit) * 100

    units_ratio = _div(input_.fixed_costs, margin)
    if not math.isfinite(units_ratio):
        raise ValueError("breakeven is undefined for a zero contribution margin")
    breakeven_units = math.ceil(units_ratio)
    breakeven_revenue = breakeven_units * input_.price_per_unit

    units_per_month = _truncated_twelfth(breakeven_units)
    forecast = []
    cumulative = 0.0
    breakeven_month = 0
    for month in range(1, input_.months_to_forecast + 1):
        units = units_per_month * month
        revenue = units * input_.price_per_unit
        variable_costs = units * input_.variable_cost_per_unit
        total_costs = input_.fixed_costs + variable_costs
        profit = revenue - total_costs
        cumulative += profit
        is_breakeven = cumulative >= 0 and breakeven_month == 0
        if is_breakeven:
            breakeven_month = month
        forecast.append(
            MonthForecast(
                month=month,
                units_sold=units,
                revenue=revenue,
                variable_costs=variable_costs,
                fixed_costs=input_.fixed_costs,
                total_costs=total_costs,
                profit=profit,
                cumulative_profit=cumulative,
                is_breakeven=is_breakeven,
            )
        )

    chart = BreakevenChartData(
        labels=[f"Month {f.month}" for f in forecast],
        revenue=[f.revenue for f in forecast],
        costs=[f.total_costs for f in forecast],
        profit=[f.cumulative_profit for f in forecast],
    )
    return BreakevenOutput(
        breakeven_units=breakeven_units,
        breakeven_revenue=breakeven_revenue,
        breakeven_month=breakeven_month,
        contribution_margin=margin,
        contribution_margin_percent=margin_percent,
        monthly_forecast=forecast,
        chart_data=chart,
    )


class CalculatorService:
    """Runs the calculators and stores their results."""

    def __init__(self, calculator_repo: Any) -> None:
        self.calculator_repo = calculator_repo

    def calculate_valuation(self, input_: ValuationInput) -> ValuationOutput:
        return calculate_valuation(input_)

    def calculate_breakeven(self, input_: BreakevenInput) -> BreakevenOutput:
        return calculate_breakeven(input_)

    def save_result(self, result: Any) -> None:
        try:
            self.calculator_repo.create(result)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to save result", 500) from exc

    def get_results_by_email(self, email: str, calculator_type: str = "") -> list:
        return self.calculator_repo.get_by_email(email, calculator_type)

    def get_analytics(self) -> dict:
        return self.calculator_repo.get_analytics()