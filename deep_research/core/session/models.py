"""
Research session models.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from deep_research.services.search.models import SearchResult


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class ResearchStatus(str, Enum):
    """Lifecycle of a research session, in order."""
    PLANNING = "planning"
    SEARCHING = "searching"
    SYNTHESIZING = "synthesizing"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)


_STATUS_ORDER = list(ResearchStatus)


class SubQuestionStatus(str, Enum):
    """Progress of a single sub-question."""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class ResearchStepType(str, Enum):
    """Kinds of entries in a session's step log."""
    QUESTION_ANALYSIS = "question_analysis"
    SEARCH = "search"
    RESULT_ANALYSIS = "result_analysis"
    SYNTHESIS = "synthesis"
    FOLLOW_UP = "follow_up"


@dataclass
class ResearchStep:
    """One audit-log entry recording a phase of session progress."""

    type: ResearchStepType
    content: str
    id: str = field(default_factory=new_id)
    timestamp: datetime = field(default_factory=utcnow)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class SubQuestion:
    """A decomposed unit of the main question."""

    question: str
    id: str = field(default_factory=new_id)
    status: SubQuestionStatus = SubQuestionStatus.PENDING
    search_results: Optional[list[SearchResult]] = None
    analysis: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == SubQuestionStatus.PENDING

    @property
    def is_completed(self) -> bool:
        return self.status == SubQuestionStatus.COMPLETED


@dataclass
class ResearchSession:
    """
    Accumulated state of one research request.

    ``steps`` only grows; ``sub_questions`` keeps the order it was created
    with. ``report`` and ``end_time`` are set together when the session
    completes.
    """

    question: str
    id: str = field(default_factory=new_id)
    sub_questions: list[SubQuestion] = field(default_factory=list)
    steps: list[ResearchStep] = field(default_factory=list)
    status: ResearchStatus = ResearchStatus.PLANNING
    report: Optional[str] = None
    start_time: datetime = field(default_factory=utcnow)
    end_time: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status == ResearchStatus.COMPLETED

    @property
    def pending_count(self) -> int:
        return sum(1 for sq in self.sub_questions if sq.is_pending)

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds()

    def next_pending(self) -> Optional[SubQuestion]:
        """First pending sub-question in stored order."""
        return next((sq for sq in self.sub_questions if sq.is_pending), None)

    def add_step(
        self,
        step_type: ResearchStepType,
        content: str,
        **metadata: Any,
    ) -> ResearchStep:
        step = ResearchStep(type=step_type, content=content, metadata=dict(metadata))
        self.steps.append(step)
        return step

    def advance_to(self, status: ResearchStatus) -> None:
        """Move to ``status``; moving backwards is a programming error."""
        if status.rank < self.status.rank:
            raise ValueError(
                f"Cannot move research {self.id} from {self.status.value} back to {status.value}"
            )
        self.status = status

    def complete(self, report: str) -> None:
        self.advance_to(ResearchStatus.COMPLETED)
        self.report = report
        self.end_time = utcnow()
