"""
Tool Request/Response Schemas.

Pydantic models validating tool-call payloads once, at the boundary.
Research requests form a union tagged by ``action``.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError as PydanticValidationError,
    field_validator,
)

from deep_research.processing.question import DEFAULT_MAX_SUB_QUESTIONS, MAX_SUB_QUESTIONS_CAP
from deep_research.utils.exceptions import StateError, ValidationError


RESEARCH_ACTIONS = ("start", "status", "continue", "report")


# =============================================================================
# RESPONSE ENVELOPE
# =============================================================================

class ToolResponse(BaseModel):
    """Envelope returned by every tool call."""
    status: Literal["success", "error"]
    result: Optional[dict[str, Any]] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, result: dict[str, Any]) -> "ToolResponse":
        return cls(status="success", result=result)

    @classmethod
    def failure(cls, message: str) -> "ToolResponse":
        return cls(status="error", error=message)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


# =============================================================================
# RESEARCH REQUESTS
# =============================================================================

class _ToolRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, str_strip_whitespace=True)


class StartRequest(_ToolRequest):
    """Begin a new research session."""
    action: Literal["start"] = "start"
    query: str = Field(..., min_length=1, description="The research question or topic")
    max_sub_questions: int = Field(
        default=DEFAULT_MAX_SUB_QUESTIONS,
        ge=1,
        alias="maxSubQuestions",
        description="Maximum number of sub-questions (capped at 10)",
    )

    @field_validator("max_sub_questions")
    @classmethod
    def cap_sub_questions(cls, v: int) -> int:
        return min(v, MAX_SUB_QUESTIONS_CAP)


class _SessionRequest(_ToolRequest):
    research_id: str = Field(..., min_length=1, alias="researchId")


class ContinueRequest(_SessionRequest):
    """Advance a session by one sub-question or synthesize it."""
    action: Literal["continue"]


class StatusRequest(_SessionRequest):
    """Read a session's progress."""
    action: Literal["status"]


class ReportRequest(_SessionRequest):
    """Read a completed session's report."""
    action: Literal["report"]


ResearchRequest = Annotated[
    Union[StartRequest, ContinueRequest, StatusRequest, ReportRequest],
    Field(discriminator="action"),
]

_research_request_adapter: TypeAdapter = TypeAdapter(ResearchRequest)


def _to_validation_error(exc: PydanticValidationError, action: str) -> ValidationError:
    err = exc.errors()[0]
    loc = [str(part) for part in err.get("loc", ()) if str(part) != action]
    field = loc[-1] if loc else "request"

    if err.get("type") == "missing":
        if field == "query":
            return ValidationError(field, "Query is required to start research")
        return ValidationError(field, f"{field} is required for action '{action}'")
    if field == "query" and err.get("type") == "string_too_short":
        return ValidationError(field, "Query cannot be empty")
    return ValidationError(field, f"Invalid {field}: {err.get('msg')}")


def parse_research_request(params: Optional[dict[str, Any]]) -> Union[
    StartRequest, ContinueRequest, StatusRequest, ReportRequest
]:
    """
    Validate a raw research tool payload into its request variant.

    Raises:
        StateError: Unknown ``action`` value
        ValidationError: Missing or invalid fields
    """
    data = dict(params or {})
    if data.get("action") is None:
        data["action"] = "start"

    action = data["action"]
    if action not in RESEARCH_ACTIONS:
        raise StateError(f"Invalid action: {action}")

    try:
        return _research_request_adapter.validate_python(data)
    except PydanticValidationError as e:
        raise _to_validation_error(e, action) from e


# =============================================================================
# WEB SEARCH REQUEST
# =============================================================================

class WebSearchRequest(_ToolRequest):
    """Direct web search."""
    query: str = Field(..., min_length=1, description="Search query (max 400 chars)")
    count: int = Field(default=10, description="Number of results (1-20)")
    offset: int = Field(default=0, description="Pagination offset (0-9)")

    @field_validator("count")
    @classmethod
    def clamp_count(cls, v: int) -> int:
        return max(1, min(v, 20))

    @field_validator("offset")
    @classmethod
    def clamp_offset(cls, v: int) -> int:
        return max(0, min(v, 9))


def parse_web_search_request(params: Optional[dict[str, Any]]) -> WebSearchRequest:
    try:
        return WebSearchRequest.model_validate(params or {})
    except PydanticValidationError as e:
        err = e.errors()[0]
        field = str(err["loc"][-1]) if err.get("loc") else "request"
        if field == "query":
            raise ValidationError(field, "Search query is required") from e
        raise ValidationError(field, f"Invalid {field}: {err.get('msg')}") from e
