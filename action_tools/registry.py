"""Construct the configured action tools."""
from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

from action_tools.integrations.flux import FluxTool
from action_tools.integrations.openweather import OpenWeatherTool
from action_tools.integrations.portdox import PortdoxTool
from action_tools.integrations.wordpress import WordPressTool
from action_tools.tools.action import ActionTool
from action_tools.tools.exceptions import ToolCredentialsMissingError, ToolNotFoundError
from action_tools.tools.provider import ActionToolProvider
from utils.config import Config
from utils.logger import get_logger

logger = get_logger(__name__)

ToolFactory = Callable[[Config], ActionTool]

TOOL_FACTORIES: Dict[str, ToolFactory] = {
    "wordpress": lambda cfg: WordPressTool(cfg.wordpress.base_url, timeout=cfg.http.timeout),
    "flux": lambda cfg: FluxTool(
        base_url=cfg.flux.base_url,
        poll_interval=cfg.flux.poll_interval,
        max_wait=cfg.flux.max_wait,
        output_dir=cfg.flux.output_dir or None,
        timeout=cfg.http.timeout,
    ),
    "openweather": lambda cfg: OpenWeatherTool(base_url=cfg.openweather.base_url, timeout=cfg.http.timeout),
    "portdox": lambda cfg: PortdoxTool(base_url=cfg.portdox.base_url, timeout=cfg.http.timeout),
}


def build_tools(config: Config, names: Optional[Iterable[str]] = None) -> List[ActionTool]:
    """Instantiate tools by name.

    With explicit ``names`` a tool whose credentials are missing is an error.
    Otherwise every tool enabled in the config is attempted and unconfigured
    ones are skipped with a warning.
    """
    explicit = names is not None
    tools: List[ActionTool] = []
    for name in (names if explicit else config.tools.enabled):
        factory = TOOL_FACTORIES.get(name)
        if factory is None:
            raise ToolNotFoundError(f"Unknown tool requested: {name}")
        try:
            tools.append(factory(config))
        except ToolCredentialsMissingError as exc:
            if explicit:
                raise
            logger.warning("tool_skipped", tool_id=name, reason=exc.message)
    return tools


def build_provider(config: Config, names: Optional[Iterable[str]] = None) -> ActionToolProvider:
    return ActionToolProvider(build_tools(config, names))
