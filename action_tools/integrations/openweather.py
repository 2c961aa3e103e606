"""OpenWeather One Call API 3.0 tool."""
from __future__ import annotations

import os
from typing import Any, ClassVar, Dict, Literal, Optional

from pydantic import Field

from action_tools.tools.action import ActionTool, InvocationContext, action
from action_tools.tools.credentials import StaticKey
from action_tools.tools.exceptions import ToolCredentialsMissingError
from action_tools.tools.http import RestClient
from action_tools.tools.schema import ActionRequest, AllOf

_LAT_LON = ("lat", "lon")

HELP = {
    "title": "OpenWeather One Call API 3.0 Help",
    "description": "Weather data for any coordinates: current conditions, forecasts, history and summaries.",
    "endpoints": {
        "current_and_forecast": {
            "action": "current_forecast",
            "description": "Current weather, minute forecast for 1 hour, hourly for 48 hours, daily for 8 days and alerts.",
            "required": ["lat", "lon"],
            "optional": ["exclude", "units", "lang"],
        },
        "timestamp": {
            "action": "timestamp",
            "description": "Weather for any moment from 1979-01-01 up to 4 days ahead, given as a unix timestamp.",
            "required": ["lat", "lon", "dt"],
            "optional": ["units", "lang"],
        },
        "daily_aggregation": {
            "action": "daily_aggregation",
            "description": "Aggregated weather for one date (YYYY-MM-DD), from 1979-01-02 up to 1.5 years ahead.",
            "required": ["lat", "lon", "date"],
            "optional": ["tz", "units", "lang"],
        },
        "overview": {
            "action": "overview",
            "description": "Human-readable weather summary for today or tomorrow.",
            "required": ["lat", "lon"],
            "optional": ["date", "units"],
        },
    },
    "units": ["standard", "metric", "imperial"],
}


class OpenWeatherRequest(ActionRequest):
    action: Literal["help", "current_forecast", "timestamp", "daily_aggregation", "overview"]
    lat: Optional[float] = Field(None, ge=-90, le=90, description="Latitude in decimal degrees.")
    lon: Optional[float] = Field(None, ge=-180, le=180, description="Longitude in decimal degrees.")
    exclude: Optional[str] = Field(
        None, description="Comma-separated parts to exclude: current, minutely, hourly, daily, alerts."
    )
    units: Optional[Literal["standard", "metric", "imperial"]] = Field(None, description="Units of measurement.")
    lang: Optional[str] = Field(None, description="Language code of the output.")
    dt: Optional[int] = Field(None, description="Unix timestamp (UTC) of the requested moment.")
    date: Optional[str] = Field(None, pattern=r"^\d{4}-\d{2}-\d{2}$", description="Date in YYYY-MM-DD format.")
    tz: Optional[str] = Field(None, pattern=r"^[+-]\d{2}:\d{2}$", description="Timezone offset, e.g. +03:00.")

    ACTION_RULES: ClassVar = {
        "current_forecast": [AllOf(_LAT_LON, "lat and lon are required.")],
        "timestamp": [AllOf((*_LAT_LON, "dt"), "lat, lon and dt are required.")],
        "daily_aggregation": [AllOf((*_LAT_LON, "date"), "lat, lon and date are required.")],
        "overview": [AllOf(_LAT_LON, "lat and lon are required.")],
    }


class OpenWeatherTool(ActionTool):
    TOOL_ID = "openweather"
    request_model = OpenWeatherRequest
    public_actions = frozenset({"help"})
    keywords = ("weather", "forecast", "temperature", "rain", "wind", "climate", "humidity")

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: str = "https://api.openweathermap.org/data/3.0",
        session=None,
        timeout: float = 30.0,
    ):
        api_key = api_key or os.getenv("OPENWEATHER_API_KEY")
        if not api_key:
            raise ToolCredentialsMissingError("OPENWEATHER_API_KEY")
        super().__init__(StaticKey(api_key))
        self.client = RestClient(base_url, session=session, timeout=timeout)
        self.name = "OpenWeather"
        self.description = (
            "Current weather, forecasts, historical data, daily aggregates and weather overviews "
            "for a latitude/longitude. Use action 'help' for details."
        )

    def _fetch(self, path: str, params: Dict[str, Any], context: InvocationContext) -> Any:
        query = {key: value for key, value in params.items() if value is not None}
        query["appid"] = context.token
        return self.client.send_json("GET", path, params=query, failure="Request failed")

    @action("help")
    def _help(self, request, context):
        return HELP

    @action("current_forecast")
    def _current_forecast(self, request: OpenWeatherRequest, context: InvocationContext) -> Any:
        params = {
            "lat": request.lat,
            "lon": request.lon,
            "exclude": request.exclude,
            "units": request.units,
            "lang": request.lang,
        }
        return self._fetch("/onecall", params, context)

    @action("timestamp")
    def _timestamp(self, request: OpenWeatherRequest, context: InvocationContext) -> Any:
        params = {"lat": request.lat, "lon": request.lon, "dt": request.dt, "units": request.units, "lang": request.lang}
        return self._fetch("/onecall/timemachine", params, context)

    @action("daily_aggregation")
    def _daily_aggregation(self, request: OpenWeatherRequest, context: InvocationContext) -> Any:
        params = {
            "lat": request.lat,
            "lon": request.lon,
            "date": request.date,
            "tz": request.tz,
            "units": request.units,
            "lang": request.lang,
        }
        return self._fetch("/onecall/day_summary", params, context)

    @action("overview")
    def _overview(self, request: OpenWeatherRequest, context: InvocationContext) -> Any:
        params = {"lat": request.lat, "lon": request.lon, "date": request.date, "units": request.units}
        return self._fetch("/onecall/overview", params, context)
