"""Tools exposed over the tool-call transport."""
from typing import Optional

from .base import Tool, ToolRegistry
from .research_tool import DeepResearchTool
from .search_tool import WebSearchTool
from .schemas import ToolResponse


def build_registry(
    orchestrator,
    invoker,
    preview_length: Optional[int] = None,
) -> ToolRegistry:
    """Registry holding the research and web-search tools."""
    registry = ToolRegistry()
    registry.register(DeepResearchTool(orchestrator, preview_length=preview_length))
    registry.register(WebSearchTool(invoker))
    return registry


__all__ = [
    "Tool",
    "ToolRegistry",
    "ToolResponse",
    "DeepResearchTool",
    "WebSearchTool",
    "build_registry",
]
