"""Covers every OpenWeather action: success shapes, remote failures and input checks."""
import json

import pytest

from action_tools.integrations.openweather import OpenWeatherTool
from action_tools.tools.exceptions import ToolCredentialsMissingError

BASE = "https://weather.test/data/3.0"
MOCK_API_KEY = "test-api-key"


@pytest.fixture
def weather(session):
    return OpenWeatherTool(MOCK_API_KEY, base_url=BASE, session=session)


def _invoke(tool, request):
    return json.loads(tool.invoke(request))


def test_api_key_comes_from_environment(monkeypatch, session):
    monkeypatch.setenv("OPENWEATHER_API_KEY", "env-key")

    tool = OpenWeatherTool(base_url=BASE, session=session)

    assert tool.credentials.acquire() == "env-key"


def test_missing_api_key(monkeypatch):
    monkeypatch.delenv("OPENWEATHER_API_KEY", raising=False)

    with pytest.raises(ToolCredentialsMissingError):
        OpenWeatherTool()


def test_help_needs_no_network(weather, session):
    result = _invoke(weather, {"action": "help"})

    assert result["title"] == "OpenWeather One Call API 3.0 Help"
    assert "current_and_forecast" in result["endpoints"]
    assert session.calls == []


def test_current_forecast(weather, session, ok):
    session.queue(ok({"lat": 33.44, "lon": -94.04, "current": {"temp": 292.55}}))

    result = _invoke(
        weather,
        {"action": "current_forecast", "lat": 33.44, "lon": -94.04, "exclude": "hourly", "units": "metric", "lang": "en"},
    )

    assert result["lat"] == 33.44
    assert result["current"]["temp"] == 292.55
    call = session.last()
    assert call["url"] == f"{BASE}/onecall"
    assert call["params"] == {
        "lat": 33.44,
        "lon": -94.04,
        "exclude": "hourly",
        "units": "metric",
        "lang": "en",
        "appid": MOCK_API_KEY,
    }


def test_current_forecast_failure_status(weather, session, fail):
    session.queue(fail(401, "Unauthorized"))

    result = _invoke(weather, {"action": "current_forecast", "lat": 33, "lon": -94})

    assert result == {"error": "Request failed with status 401: Unauthorized"}


def test_missing_coordinates(weather, session):
    result = _invoke(weather, {"action": "current_forecast", "units": "metric"})

    assert result == {"error": "lat and lon are required."}
    assert session.calls == []


def test_timestamp(weather, session, ok):
    session.queue(ok({"lat": 39.099724, "lon": -94.578331, "data": [{"dt": 1643803200, "temp": 279.13}]}))

    result = _invoke(
        weather,
        {"action": "timestamp", "lat": 39.099724, "lon": -94.578331, "dt": 1643803200, "units": "imperial"},
    )

    assert result["data"][0]["dt"] == 1643803200
    assert session.last()["url"] == f"{BASE}/onecall/timemachine"
    assert session.last()["params"]["dt"] == 1643803200


def test_timestamp_not_found(weather, session, fail):
    session.queue(fail(404, "Not found"))

    result = _invoke(weather, {"action": "timestamp", "lat": 0, "lon": 0, "dt": 1234567890})

    assert result == {"error": "Request failed with status 404: Not found"}


def test_daily_aggregation(weather, session, ok):
    session.queue(ok({"lat": 33, "lon": 35, "date": "2020-03-04", "temperature": {"min": 286.48, "max": 299.24}}))

    result = _invoke(weather, {"action": "daily_aggregation", "lat": 33, "lon": 35, "date": "2020-03-04", "tz": "+02:00"})

    assert result["temperature"] == {"min": 286.48, "max": 299.24}
    assert session.last()["url"] == f"{BASE}/onecall/day_summary"
    assert session.last()["params"]["tz"] == "+02:00"


def test_daily_aggregation_rejects_malformed_date(weather, session):
    result = _invoke(weather, {"action": "daily_aggregation", "lat": 33, "lon": 35, "date": "invalid-date"})

    assert result["error"].startswith("Validation error: date:")
    assert session.calls == []


def test_overview(weather, session, ok):
    session.queue(ok({"lat": 51.509865, "lon": -0.118092, "weather_overview": "The current weather is overcast..."}))

    result = _invoke(weather, {"action": "overview", "lat": 51.509865, "lon": -0.118092, "date": "2024-05-13"})

    assert "overcast" in result["weather_overview"]
    assert session.last()["url"] == f"{BASE}/onecall/overview"
    assert "lang" not in session.last()["params"]


def test_out_of_range_latitude(weather, session):
    result = _invoke(weather, {"action": "overview", "lat": 123.0, "lon": 0})

    assert "error" in result
    assert session.calls == []
