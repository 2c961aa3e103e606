from action_tools.integrations.flux import FluxTool
from action_tools.integrations.openweather import OpenWeatherTool
from action_tools.integrations.portdox import PortdoxTool
from action_tools.integrations.wordpress import WordPressTool

__all__ = ["FluxTool", "OpenWeatherTool", "PortdoxTool", "WordPressTool"]
