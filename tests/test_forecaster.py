import pytest

from app.core.errors import InsufficientDataError
from app.utils.forecaster import RegressionModel, forecast_next_month


def test_perfect_linear_fit():
    forecast = forecast_next_month([1000, 1100, 1200])
    assert forecast.slope == pytest.approx(100)
    assert forecast.prediction == pytest.approx(1300)
    assert forecast.r_squared == pytest.approx(1.0)
    assert forecast.confidence == pytest.approx(100)
    assert forecast.direction == "increasing"


def test_regression_coefficients():
    model = RegressionModel.fit([0, 1, 2], [1000, 1100, 1200])
    assert model.slope == pytest.approx(100)
    assert model.intercept == pytest.approx(1000)
    assert model.predict(3) == pytest.approx(1300)


def test_single_point_is_insufficient():
    with pytest.raises(InsufficientDataError):
        forecast_next_month([450.0])


def test_empty_series_is_insufficient():
    with pytest.raises(InsufficientDataError):
        forecast_next_month([])


def test_prediction_clamped_at_zero():
    forecast = forecast_next_month([500, 100])
    assert forecast.slope == pytest.approx(-400)
    assert forecast.prediction == 0
    assert forecast.difference == pytest.approx(-300)


def test_decreasing_trend():
    forecast = forecast_next_month([500, 400, 300])
    assert forecast.direction == "decreasing"
    assert forecast.strength == pytest.approx(100)


def test_flat_series_is_stable():
    forecast = forecast_next_month([100, 100, 100])
    assert forecast.slope == 0
    assert forecast.direction == "stable"
    assert forecast.prediction == pytest.approx(100)
    # No variance to explain
    assert forecast.r_squared == 0
    assert forecast.confidence == 0


def test_poor_fit_keeps_raw_r_squared():
    model = RegressionModel(slope=50, intercept=0)
    r2 = model.r_squared([0, 1, 2], [300, 100, 300])
    assert r2 < 0

    forecast = forecast_next_month([300, 100, 300, 100])
    assert 0 <= forecast.confidence <= 100


def test_recent_average_uses_last_three_months():
    forecast = forecast_next_month([100, 200, 300, 400])
    assert forecast.recent_average == pytest.approx(300)
    assert forecast.prediction == pytest.approx(500)
    assert forecast.difference == pytest.approx(200)


def test_to_dict_rounds_values():
    payload = forecast_next_month([100.333, 200.111, 250.777]).to_dict()
    assert set(payload) == {"prediction", "confidence", "trend", "comparison"}
    assert payload["trend"]["direction"] == "increasing"
    assert payload["prediction"] == round(payload["prediction"], 2)
    assert payload["comparison"]["recentAverage"] == pytest.approx(183.74, abs=0.01)
