"""
Next-month expense forecast from a monthly expense series.

Fits an ordinary-least-squares line over (month index, monthly expense) and
extrapolates one month ahead. Month indices are 0, 1, 2, ... in chronological
order of the series, so empty months that were omitted by the aggregator are
not counted as steps.
"""
from __future__ import annotations

from dataclasses import dataclass
from statistics import fmean
from typing import Any, Dict, List, Sequence

from app.core.errors import InsufficientDataError

MIN_DATA_POINTS = 2
RECENT_WINDOW = 3


@dataclass
class RegressionModel:
    slope: float = 0.0
    intercept: float = 0.0

    @classmethod
    def fit(cls, x: Sequence[float], y: Sequence[float]) -> "RegressionModel":
        n = len(x)
        if n != len(y) or n < MIN_DATA_POINTS:
            raise InsufficientDataError()

        x_mean = fmean(x)
        y_mean = fmean(y)
        numerator = sum((xi - x_mean) * (yi - y_mean) for xi, yi in zip(x, y))
        denominator = sum((xi - x_mean) ** 2 for xi in x)

        slope = numerator / denominator if denominator != 0 else 0.0
        return cls(slope=slope, intercept=y_mean - slope * x_mean)

    def predict(self, x: float) -> float:
        return self.slope * x + self.intercept

    def r_squared(self, x: Sequence[float], y: Sequence[float]) -> float:
        """Coefficient of determination; 0 when y has no variance."""
        y_mean = fmean(y)
        ss_res = sum((yi - self.predict(xi)) ** 2 for xi, yi in zip(x, y))
        ss_tot = sum((yi - y_mean) ** 2 for yi in y)
        return 1 - ss_res / ss_tot if ss_tot != 0 else 0.0


@dataclass
class ExpenseForecast:
    prediction: float
    r_squared: float
    slope: float
    recent_average: float
    data_points: int

    @property
    def confidence(self) -> float:
        # A negative R² is floored here; the raw value stays in r_squared
        return min(100.0, max(0.0, self.r_squared * 100))

    @property
    def direction(self) -> str:
        if self.slope > 0:
            return "increasing"
        if self.slope < 0:
            return "decreasing"
        return "stable"

    @property
    def strength(self) -> float:
        return abs(self.slope)

    @property
    def difference(self) -> float:
        return self.prediction - self.recent_average

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prediction": round(self.prediction, 2),
            "confidence": round(self.confidence, 2),
            "trend": {
                "direction": self.direction,
                "strength": round(self.strength, 2),
            },
            "comparison": {
                "recentAverage": round(self.recent_average, 2),
                "difference": round(self.difference, 2),
            },
        }


def forecast_next_month(monthly_expenses: Sequence[float]) -> ExpenseForecast:
    """
    Predict the expense total of the month following ``monthly_expenses``.

    Raises InsufficientDataError with fewer than two monthly values.
    """
    y: List[float] = [float(value) for value in monthly_expenses]
    if len(y) < MIN_DATA_POINTS:
        raise InsufficientDataError()

    x = list(range(len(y)))
    model = RegressionModel.fit(x, y)

    # Expenses cannot be negative
    prediction = max(0.0, model.predict(len(y)))

    return ExpenseForecast(
        prediction=prediction,
        r_squared=model.r_squared(x, y),
        slope=model.slope,
        recent_average=fmean(y[-RECENT_WINDOW:]),
        data_points=len(y),
    )
