"""
Tool interface and registry.

A tool describes itself with a JSON-schema definition and executes raw
parameter dicts, always answering with a :class:`ToolResponse`.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from deep_research.tools.schemas import ToolResponse


class Tool(ABC):
    """A callable tool exposed to the transport."""

    name: str
    description: str

    @abstractmethod
    def parameters(self) -> dict[str, Any]:
        """JSON schema of the accepted parameters."""
        pass

    @abstractmethod
    async def execute(self, params: Optional[dict[str, Any]]) -> ToolResponse:
        """Run the tool. Errors are returned in the envelope, never raised."""
        pass

    def definition(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters(),
        }


class ToolRegistry:
    """Name-indexed set of tools."""

    def __init__(self):
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        self._tools[tool.name] = tool

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def definitions(self) -> list[dict[str, Any]]:
        return [tool.definition() for tool in self._tools.values()]

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
