"""Tool provider exposing a fixed set of action tools to an agent."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping

from action_tools.tools.action import ActionTool
from action_tools.tools.base import JustInTimeToolingBase, ToolBase
from action_tools.tools.exceptions import ToolNotFoundError
from utils.logger import get_logger

logger = get_logger(__name__)


class ActionToolProvider(JustInTimeToolingBase):
    """Searches, loads and executes the action tools it was built with."""

    def __init__(self, tools: Iterable[ActionTool]):
        self._tools: Dict[str, ActionTool] = {tool.id: tool for tool in tools}

    def __contains__(self, tool_id: str) -> bool:
        return tool_id in self._tools

    def __iter__(self):
        return iter(self._tools.values())

    def get(self, tool_id: str) -> ActionTool:
        try:
            return self._tools[tool_id]
        except KeyError:
            raise ToolNotFoundError(f"Unknown tool requested: {tool_id}") from None

    def search(self, query: str, *, top_k: int = 10) -> List[ToolBase]:
        """Rank tools by how many query words hit their id, name or keywords."""
        words = {word.strip(".,?!").lower() for word in query.split()}
        scored = []
        for tool in self._tools.values():
            vocabulary = {tool.id, tool.name.lower(), *tool.keywords}
            score = len(words & vocabulary)
            if score:
                scored.append((score, tool))
        scored.sort(key=lambda item: -item[0])
        logger.info("tool_search", query=query, top_k=top_k, hits=len(scored))
        return [tool for _, tool in scored[:top_k]]

    def load(self, tool: ToolBase) -> ToolBase:
        return self.get(tool.id)

    def execute(self, tool: ToolBase, parameters: Mapping[str, Any]) -> str:
        return self.get(tool.id).invoke(parameters)
