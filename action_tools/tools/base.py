"""Abstract contracts for tools and the providers that hand them to an agent."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class ToolBase(ABC):
    """Metadata an agent needs to pick a tool and fill in its parameters."""

    def __init__(self, id: str):
        self.id = id

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self.id})"

    @abstractmethod
    def get_summary(self) -> str:
        """One line used when the agent selects among tools."""
        raise NotImplementedError

    @abstractmethod
    def get_details(self) -> str:
        """Longer description used when the agent generates parameters."""
        raise NotImplementedError

    @abstractmethod
    def get_parameters(self) -> Dict[str, Any]:
        """JSON Schema describing the accepted parameters."""
        raise NotImplementedError

    def get_parameter_keys(self) -> List[str]:
        return list((self.get_parameters() or {}).get("properties", {}).keys())

    def get_required_parameter_keys(self) -> List[str]:
        schema = self.get_parameters() or {}
        properties = schema.get("properties", {})
        return [key for key in schema.get("required", []) if key in properties]


class JustInTimeToolingBase(ABC):
    """A provider that can search, load and execute tools on demand."""

    @abstractmethod
    def search(self, query: str, *, top_k: int = 10) -> List[ToolBase]:
        raise NotImplementedError

    @abstractmethod
    def load(self, tool: ToolBase) -> ToolBase:
        raise NotImplementedError

    @abstractmethod
    def execute(self, tool: ToolBase, parameters: Dict[str, Any]) -> Any:
        raise NotImplementedError
