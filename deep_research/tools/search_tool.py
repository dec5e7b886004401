"""
Web search tool.

Exposes the search invoker directly: one query, scored results.
"""

from typing import Any, Optional

from deep_research.core.research.invoker import SearchInvoker
from deep_research.tools.base import Tool
from deep_research.tools.schemas import ToolResponse, parse_web_search_request
from deep_research.utils.exceptions import DeepResearchError
from deep_research.utils.logging import get_logger
from deep_research.utils.metrics import TOOL_CALLS

logger = get_logger(__name__)


class WebSearchTool(Tool):
    name = "web_search"
    description = (
        "Performs a web search and returns results scored for relevance to the "
        "query. Maximum 20 results per request, with offset for pagination."
    )

    def __init__(self, invoker: SearchInvoker):
        self.invoker = invoker

    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query (max 400 chars)"},
                "count": {
                    "type": "integer",
                    "description": "Number of results (1-20, default 10)",
                    "default": 10,
                },
                "offset": {
                    "type": "integer",
                    "description": "Pagination offset (max 9, default 0)",
                    "default": 0,
                },
            },
            "required": ["query"],
        }

    async def execute(self, params: Optional[dict[str, Any]]) -> ToolResponse:
        try:
            request = parse_web_search_request(params)
            query = self.invoker.normalize_query(request.query)
            results = await self.invoker.search(query, count=request.count, offset=request.offset)
        except DeepResearchError as e:
            logger.warning(f"Web search failed: {e.message}")
            TOOL_CALLS.labels(tool=self.name, action="search", status="error").inc()
            return ToolResponse.failure(e.message)
        except Exception as e:
            logger.exception(f"Error in {self.name} tool: {e}")
            TOOL_CALLS.labels(tool=self.name, action="search", status="error").inc()
            return ToolResponse.failure(str(e))

        TOOL_CALLS.labels(tool=self.name, action="search", status="success").inc()
        return ToolResponse.success({
            "query": query,
            "count": len(results),
            "offset": request.offset,
            "results": [r.to_dict() for r in results],
        })
