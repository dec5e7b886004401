"""
Deep research tool.

Validates research actions into request variants and dispatches them to
the orchestrator.
"""

from typing import Any, Awaitable, Callable, Optional

from deep_research.config import get_settings
from deep_research.core.research.orchestrator import ResearchOrchestrator
from deep_research.tools.base import Tool
from deep_research.tools.schemas import (
    RESEARCH_ACTIONS,
    ContinueRequest,
    ReportRequest,
    StartRequest,
    StatusRequest,
    ToolResponse,
    parse_research_request,
)
from deep_research.utils.exceptions import DeepResearchError
from deep_research.utils.logging import LogContext, get_logger
from deep_research.utils.metrics import TOOL_CALLS

logger = get_logger(__name__)


class DeepResearchTool(Tool):
    """Multi-step research over web search results."""

    name = "deep_research"
    description = (
        "Performs in-depth research on complex topics. Breaks the question into "
        "sub-questions, searches and ranks sources for each, and synthesizes a "
        "cited report. Call with action 'start', then 'continue' until the research "
        "is completed, then 'report'."
    )

    def __init__(self, orchestrator: ResearchOrchestrator, preview_length: Optional[int] = None):
        self.orchestrator = orchestrator
        self.preview_length = preview_length or get_settings().research.report_preview_length
        self._handlers: dict[type, Callable[[Any], Awaitable[dict[str, Any]]]] = {
            StartRequest: self._start,
            ContinueRequest: self._continue,
            StatusRequest: self._status,
            ReportRequest: self._report,
        }

    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The research question or topic (required for 'start')",
                },
                "maxSubQuestions": {
                    "type": "integer",
                    "description": "Maximum number of sub-questions to generate (default: 5, max: 10)",
                    "default": 5,
                    "minimum": 1,
                },
                "researchId": {
                    "type": "string",
                    "description": "ID of an existing research (required for 'status', 'continue', 'report')",
                },
                "action": {
                    "type": "string",
                    "enum": list(RESEARCH_ACTIONS),
                    "description": "Action to perform",
                    "default": "start",
                },
            },
        }

    async def execute(self, params: Optional[dict[str, Any]]) -> ToolResponse:
        params = params or {}
        action = params.get("action") or "start"
        action_label = action if action in RESEARCH_ACTIONS else "invalid"

        with LogContext(logger, tool=self.name, action=str(action), research_id=params.get("researchId")):
            try:
                request = parse_research_request(params)
                result = await self._handlers[type(request)](request)
            except DeepResearchError as e:
                logger.warning(f"{self.name} {action} failed: {e.message}")
                TOOL_CALLS.labels(tool=self.name, action=action_label, status="error").inc()
                return ToolResponse.failure(e.message)
            except Exception as e:
                logger.exception(f"Error in {self.name} tool: {e}")
                TOOL_CALLS.labels(tool=self.name, action=action_label, status="error").inc()
                return ToolResponse.failure(str(e))

        TOOL_CALLS.labels(tool=self.name, action=action_label, status="success").inc()
        return ToolResponse.success(result)

    async def _start(self, request: StartRequest) -> dict[str, Any]:
        session = await self.orchestrator.start(request.query, request.max_sub_questions)
        return {
            "researchId": session.id,
            "question": session.question,
            "subQuestions": [sq.question for sq in session.sub_questions],
            "status": session.status.value,
        }

    async def _continue(self, request: ContinueRequest) -> dict[str, Any]:
        outcome = await self.orchestrator.continue_research(request.research_id)
        return outcome.to_dict(self.preview_length)

    async def _status(self, request: StatusRequest) -> dict[str, Any]:
        return await self.orchestrator.status(request.research_id)

    async def _report(self, request: ReportRequest) -> dict[str, Any]:
        return await self.orchestrator.report(request.research_id)
