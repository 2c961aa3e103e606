"""Agent-callable action tools for WordPress, Flux, OpenWeather and Portdox."""

__version__ = "0.1.0"
