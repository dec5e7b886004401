"""
Research Orchestrator.

Drives a research session through planning, searching, synthesizing and
completion. Each ``continue_research`` call advances exactly one
sub-question; once none are pending the next call synthesizes the report.
"""

from dataclasses import dataclass
from typing import Any, Optional

from deep_research.config import get_settings
from deep_research.core.research.invoker import SearchInvoker
from deep_research.core.session.models import (
    ResearchSession,
    ResearchStatus,
    ResearchStepType,
    SubQuestion,
    SubQuestionStatus,
)
from deep_research.processing.analysis import analyze_results
from deep_research.processing.question import clamp_max_sub_questions, decompose_question
from deep_research.processing.synthesis import synthesize_report
from deep_research.storage.base import SessionStore
from deep_research.utils.exceptions import DeepResearchError, StateError
from deep_research.utils.logging import get_logger
from deep_research.utils.metrics import SUB_QUESTIONS_PROCESSED

logger = get_logger(__name__)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class ContinueOutcome:
    """What a single ``continue_research`` call did."""

    session: ResearchSession
    completed_sub_question: Optional[str] = None
    remaining: int = 0
    synthesized: bool = False
    already_completed: bool = False

    def to_dict(self, preview_length: int = 500) -> dict[str, Any]:
        session = self.session
        result: dict[str, Any] = {
            "researchId": session.id,
            "question": session.question,
            "status": session.status.value,
        }
        if self.completed_sub_question is not None:
            result["subQuestionCompleted"] = self.completed_sub_question
            result["remainingSubQuestions"] = self.remaining
            return result

        report = session.report or ""
        preview = report[:preview_length]
        if len(report) > preview_length:
            preview += "..."
        result["message"] = (
            "Research is already completed" if self.already_completed else "Research completed"
        )
        result["reportPreview"] = preview
        return result


class ResearchOrchestrator:
    """
    State machine over research sessions.

    The orchestrator owns every mutation of a session. Sessions live in the
    injected :class:`SessionStore`; concurrent ``continue_research`` calls for
    one session are rejected by the store's writer guard.
    """

    def __init__(
        self,
        store: SessionStore,
        invoker: SearchInvoker,
        results_per_search: Optional[int] = None,
        top_results: Optional[int] = None,
        sentences_per_result: Optional[int] = None,
    ):
        settings = get_settings().research
        self.store = store
        self.invoker = invoker
        self.results_per_search = results_per_search or settings.results_per_search
        self.top_results = top_results or settings.top_results
        self.sentences_per_result = sentences_per_result or settings.sentences_per_result

    async def start(self, question: str, max_sub_questions: Optional[int] = None) -> ResearchSession:
        """
        Open a new session and plan its sub-questions.

        The session is only published to the store once it is searching, so
        no caller ever observes a half-planned session.
        """
        limit = clamp_max_sub_questions(max_sub_questions)
        session = ResearchSession(question=question)

        step = session.add_step(
            ResearchStepType.QUESTION_ANALYSIS,
            f'Analyzing question: "{question}"',
        )
        session.sub_questions = [
            SubQuestion(question=text) for text in decompose_question(question, limit)
        ]
        listing = "\n".join(f"- {sq.question}" for sq in session.sub_questions)
        step.content = (
            f'Analyzed question: "{question}"\n'
            f"Generated {len(session.sub_questions)} sub-questions:\n{listing}"
        )
        step.metadata["sub_question_count"] = len(session.sub_questions)

        session.advance_to(ResearchStatus.SEARCHING)
        await self.store.put(session)

        logger.info(
            f"Started research {session.id} with {len(session.sub_questions)} sub-questions"
        )
        return session

    async def continue_research(self, research_id: Optional[str]) -> ContinueOutcome:
        """
        Advance a session by one step.

        Raises:
            SessionNotFoundError: Unknown research id
            BusyError: Another continue is in flight for this session
            UpstreamError: The search failed; the sub-question is pending again
        """
        session = await self.store.require(research_id)

        async with self.store.writer(session.id):
            if session.is_completed:
                return ContinueOutcome(session=session, already_completed=True)
            if session.status == ResearchStatus.PLANNING:
                raise StateError("Research is still being planned")

            sub_question = session.next_pending()
            if sub_question is None:
                return await self._synthesize(session)
            return await self._advance(session, sub_question)

    async def _advance(self, session: ResearchSession, sub_question: SubQuestion) -> ContinueOutcome:
        text = sub_question.question
        sub_question.status = SubQuestionStatus.IN_PROGRESS
        step = session.add_step(
            ResearchStepType.SEARCH,
            f'Searching for: "{text}"',
            sub_question_id=sub_question.id,
        )

        try:
            results = await self.invoker.search(text, count=self.results_per_search)
            sub_question.search_results = results
            step.content = f'Searched for: "{text}"\nFound {len(results)} results'
            step.metadata["result_count"] = len(results)

            step = session.add_step(
                ResearchStepType.RESULT_ANALYSIS,
                f'Analyzing results for: "{text}"',
                sub_question_id=sub_question.id,
            )
            sub_question.analysis = analyze_results(
                results,
                text,
                top_n=self.top_results,
                sentences_per_result=self.sentences_per_result,
            )
            step.content = f'Analyzed results for: "{text}"'
        except Exception as e:
            sub_question.status = SubQuestionStatus.PENDING
            sub_question.search_results = None
            sub_question.analysis = None
            step.content = f"{step.content}\nFailed: {e}"
            step.metadata["error"] = str(e)
            await self.store.put(session)
            SUB_QUESTIONS_PROCESSED.labels(outcome="failed").inc()
            logger.warning(f"Research {session.id}: '{text}' failed and is pending again: {e}")
            if isinstance(e, DeepResearchError):
                raise
            raise DeepResearchError(
                f"Failed to analyze results: {e}",
                code="ANALYSIS_ERROR",
                recoverable=True,
            ) from e

        sub_question.status = SubQuestionStatus.COMPLETED
        await self.store.put(session)
        SUB_QUESTIONS_PROCESSED.labels(outcome="completed").inc()

        remaining = session.pending_count
        logger.info(f"Research {session.id}: completed '{text}', {remaining} remaining")
        return ContinueOutcome(
            session=session,
            completed_sub_question=text,
            remaining=remaining,
        )

    async def _synthesize(self, session: ResearchSession) -> ContinueOutcome:
        session.advance_to(ResearchStatus.SYNTHESIZING)
        step = session.add_step(ResearchStepType.SYNTHESIS, "Synthesizing research results")

        report = synthesize_report(session.question, session.sub_questions)

        step.content = "Synthesized research results"
        step.metadata["report_length"] = len(report)
        session.complete(report)
        await self.store.put(session)

        logger.info(f"Research {session.id} completed in {session.duration_seconds:.2f}s")
        return ContinueOutcome(session=session, synthesized=True)

    async def status(self, research_id: Optional[str]) -> dict[str, Any]:
        """Read-only projection of a session's progress."""
        session = await self.store.require(research_id)
        return {
            "researchId": session.id,
            "question": session.question,
            "status": session.status.value,
            "subQuestions": [
                {"question": sq.question, "status": sq.status.value}
                for sq in session.sub_questions
            ],
            "steps": len(session.steps),
            "startTime": _iso(session.start_time),
            "endTime": _iso(session.end_time),
        }

    async def report(self, research_id: Optional[str]) -> dict[str, Any]:
        """
        The finished report of a session.

        Raises:
            SessionNotFoundError: Unknown research id
            StateError: The session has not completed yet
        """
        session = await self.store.require(research_id)
        if not session.is_completed:
            raise StateError("Research is not yet completed")
        return {
            "researchId": session.id,
            "question": session.question,
            "report": session.report,
            "subQuestions": len(session.sub_questions),
            "steps": len(session.steps),
            "startTime": _iso(session.start_time),
            "endTime": _iso(session.end_time),
            "duration": session.duration_seconds,
        }
