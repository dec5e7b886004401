"""
Tool Routes.

HTTP transport for tool calls: list definitions and invoke a tool by name.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, HTTPException, Request

from deep_research.tools import ToolRegistry
from deep_research.utils.logging import get_logger


logger = get_logger(__name__)
router = APIRouter(prefix="/tools", tags=["tools"])


def _registry(request: Request) -> ToolRegistry:
    return request.app.state.registry


@router.get("")
async def list_tools(request: Request) -> dict[str, Any]:
    """Definitions of every registered tool."""
    return {"tools": _registry(request).definitions()}


@router.post("/{name}")
async def call_tool(
    name: str,
    request: Request,
    params: Optional[dict[str, Any]] = Body(default=None),
) -> dict[str, Any]:
    """
    Invoke a tool.

    Success and error envelopes are both returned with HTTP 200; only an
    unknown tool name is an HTTP error.
    """
    tool = _registry(request).get(name)
    if tool is None:
        raise HTTPException(status_code=404, detail=f"Unknown tool: {name}")

    response = await tool.execute(params or {})
    return response.to_dict()
