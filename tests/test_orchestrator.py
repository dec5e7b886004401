"""Tests for the research orchestrator."""

import asyncio

import pytest

from conftest import FakeSearchService
from deep_research.core.research import ResearchOrchestrator, SearchInvoker
from deep_research.core.session.models import (
    ResearchStatus,
    ResearchStepType,
    SubQuestionStatus,
)
from deep_research.utils.exceptions import (
    BusyError,
    DeepResearchError,
    SearchError,
    SessionNotFoundError,
    StateError,
    UpstreamError,
)


async def _run_to_completion(orchestrator, research_id):
    outcomes = []
    while True:
        outcome = await orchestrator.continue_research(research_id)
        outcomes.append(outcome)
        if outcome.completed_sub_question is None:
            return outcomes


class TestStart:
    """Tests for starting research."""

    @pytest.mark.asyncio
    async def test_compound_question(self, orchestrator, store):
        session = await orchestrator.start("Compare solar and wind energy")

        assert [sq.question for sq in session.sub_questions] == ["Compare solar?", "wind energy?"]
        assert session.status == ResearchStatus.SEARCHING
        assert all(sq.status == SubQuestionStatus.PENDING for sq in session.sub_questions)
        assert await store.get(session.id) is session

    @pytest.mark.asyncio
    async def test_planning_step_lists_sub_questions(self, orchestrator):
        session = await orchestrator.start("What is quantum computing")

        assert len(session.steps) == 1
        step = session.steps[0]
        assert step.type == ResearchStepType.QUESTION_ANALYSIS
        assert step.content.startswith('Analyzed question: "What is quantum computing"\nGenerated 4 sub-questions:\n')
        assert "- What are the applications of quantum computing?" in step.content

    @pytest.mark.asyncio
    async def test_sub_question_limit(self, orchestrator):
        session = await orchestrator.start("What is quantum computing", max_sub_questions=2)
        assert len(session.sub_questions) == 2

        capped = await orchestrator.start("a or b or c or d or e or f or g or h or i or j or k or l")
        assert len(capped.sub_questions) == 5

    @pytest.mark.asyncio
    async def test_no_search_on_start(self, orchestrator, search_service):
        await orchestrator.start("Compare solar and wind energy")
        assert search_service.calls == []


class TestContinue:
    """Tests for advancing research one sub-question at a time."""

    @pytest.mark.asyncio
    async def test_full_lifecycle(self, orchestrator, search_service):
        session = await orchestrator.start("Compare solar and wind energy")

        first = await orchestrator.continue_research(session.id)
        assert first.completed_sub_question == "Compare solar?"
        assert first.remaining == 1
        assert first.to_dict() == {
            "researchId": session.id,
            "question": "Compare solar and wind energy",
            "status": "searching",
            "subQuestionCompleted": "Compare solar?",
            "remainingSubQuestions": 1,
        }

        second = await orchestrator.continue_research(session.id)
        assert second.completed_sub_question == "wind energy?"
        assert second.remaining == 0

        final = await orchestrator.continue_research(session.id)
        assert final.synthesized
        assert session.status == ResearchStatus.COMPLETED
        assert session.report.startswith("# Research Report: Compare solar and wind energy")
        assert session.end_time >= session.start_time
        assert final.to_dict()["message"] == "Research completed"

        assert [call["query"] for call in search_service.calls] == ["Compare solar?", "wind energy?"]
        assert all(call["count"] == 10 for call in search_service.calls)

    @pytest.mark.asyncio
    async def test_step_log(self, orchestrator):
        session = await orchestrator.start("Compare solar and wind energy")
        await _run_to_completion(orchestrator, session.id)

        assert [step.type for step in session.steps] == [
            ResearchStepType.QUESTION_ANALYSIS,
            ResearchStepType.SEARCH,
            ResearchStepType.RESULT_ANALYSIS,
            ResearchStepType.SEARCH,
            ResearchStepType.RESULT_ANALYSIS,
            ResearchStepType.SYNTHESIS,
        ]
        assert session.steps[1].content == 'Searched for: "Compare solar?"\nFound 3 results'
        assert session.steps[2].content == 'Analyzed results for: "Compare solar?"'
        assert session.steps[-1].content == "Synthesized research results"

    @pytest.mark.asyncio
    async def test_sources_collected_once(self, orchestrator):
        session = await orchestrator.start("Compare solar and wind energy")
        await _run_to_completion(orchestrator, session.id)

        sources = session.report.split("## Sources\n", 1)[1]
        assert sources.count("https://energy.example/solar") == 1
        assert len(sources.strip().splitlines()) == 3

    @pytest.mark.asyncio
    async def test_status_never_moves_backwards(self, orchestrator):
        session = await orchestrator.start("Compare solar and wind energy")
        seen = [session.status.rank]
        for _ in range(5):
            await orchestrator.continue_research(session.id)
            seen.append(session.status.rank)

        assert seen == sorted(seen)

    @pytest.mark.asyncio
    async def test_continue_after_completion_is_idempotent(self, orchestrator, search_service):
        session = await orchestrator.start("Compare solar and wind energy")
        await _run_to_completion(orchestrator, session.id)
        report = session.report
        steps = len(session.steps)
        calls = len(search_service.calls)

        again = await orchestrator.continue_research(session.id)

        assert again.already_completed
        assert again.to_dict()["message"] == "Research is already completed"
        assert session.report == report
        assert len(session.steps) == steps
        assert len(search_service.calls) == calls

    @pytest.mark.asyncio
    async def test_report_preview(self, orchestrator):
        session = await orchestrator.start("Compare solar and wind energy")
        outcomes = await _run_to_completion(orchestrator, session.id)

        preview = outcomes[-1].to_dict(preview_length=20)["reportPreview"]
        assert preview == session.report[:20] + "..."

        whole = outcomes[-1].to_dict(preview_length=len(session.report))["reportPreview"]
        assert whole == session.report

    @pytest.mark.asyncio
    async def test_no_results_still_completes(self, store):
        orchestrator = ResearchOrchestrator(store, SearchInvoker(FakeSearchService(default=[]), api_key="k"))
        session = await orchestrator.start("Compare solar and wind energy")
        await orchestrator.continue_research(session.id)

        assert session.sub_questions[0].analysis == 'No results found for query: "Compare solar?"'
        assert session.sub_questions[0].status == SubQuestionStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_unknown_research(self, orchestrator):
        with pytest.raises(SessionNotFoundError):
            await orchestrator.continue_research("nope")


class TestFailure:
    """Tests for search failures during continue."""

    @pytest.mark.asyncio
    async def test_failure_reverts_sub_question(self, store):
        service = FakeSearchService(errors=[SearchError("Search failed with status 503")])
        orchestrator = ResearchOrchestrator(store, SearchInvoker(service, api_key="k"))
        session = await orchestrator.start("Compare solar and wind energy")

        with pytest.raises(UpstreamError) as exc:
            await orchestrator.continue_research(session.id)

        assert exc.value.message == "Failed to perform search: Search failed with status 503"
        sub_question = session.sub_questions[0]
        assert sub_question.status == SubQuestionStatus.PENDING
        assert sub_question.search_results is None
        assert sub_question.analysis is None
        assert session.status == ResearchStatus.SEARCHING
        assert len(session.steps) == 2
        assert "\nFailed: " in session.steps[-1].content
        assert "error" in session.steps[-1].metadata

    @pytest.mark.asyncio
    async def test_retry_after_failure(self, store):
        service = FakeSearchService(errors=[SearchError("down")])
        orchestrator = ResearchOrchestrator(store, SearchInvoker(service, api_key="k"))
        session = await orchestrator.start("Compare solar and wind energy")

        with pytest.raises(UpstreamError):
            await orchestrator.continue_research(session.id)
        outcome = await orchestrator.continue_research(session.id)

        assert outcome.completed_sub_question == "Compare solar?"
        assert [call["query"] for call in service.calls] == ["Compare solar?", "Compare solar?"]

    @pytest.mark.asyncio
    async def test_analysis_failure_is_wrapped(self, store, invoker, monkeypatch):
        orchestrator = ResearchOrchestrator(store, invoker)
        session = await orchestrator.start("Compare solar and wind energy")

        def explode(*args, **kwargs):
            raise KeyError("boom")

        monkeypatch.setattr("deep_research.core.research.orchestrator.analyze_results", explode)

        with pytest.raises(DeepResearchError) as exc:
            await orchestrator.continue_research(session.id)

        assert exc.value.code == "ANALYSIS_ERROR"
        assert exc.value.message.startswith("Failed to analyze results: ")
        assert session.sub_questions[0].status == SubQuestionStatus.PENDING


class TestConcurrency:
    """Tests for concurrent continue calls."""

    @pytest.mark.asyncio
    async def test_concurrent_continue_is_rejected(self, orchestrator, search_service):
        session = await orchestrator.start("Compare solar and wind energy")
        search_service.gate = asyncio.Event()
        search_service.entered = asyncio.Event()

        first = asyncio.create_task(orchestrator.continue_research(session.id))
        await search_service.entered.wait()

        with pytest.raises(BusyError):
            await orchestrator.continue_research(session.id)

        search_service.gate.set()
        outcome = await first

        assert outcome.completed_sub_question == "Compare solar?"
        assert len(search_service.calls) == 1
        assert session.sub_questions[1].status == SubQuestionStatus.PENDING

    @pytest.mark.asyncio
    async def test_different_sessions_proceed_independently(self, orchestrator, search_service):
        a = await orchestrator.start("Compare solar and wind energy")
        b = await orchestrator.start("tea or coffee")

        outcomes = await asyncio.gather(
            orchestrator.continue_research(a.id),
            orchestrator.continue_research(b.id),
        )

        assert [o.completed_sub_question for o in outcomes] == ["Compare solar?", "tea?"]


class TestQueries:
    """Tests for status and report reads."""

    @pytest.mark.asyncio
    async def test_status(self, orchestrator):
        session = await orchestrator.start("Compare solar and wind energy")
        await orchestrator.continue_research(session.id)

        status = await orchestrator.status(session.id)

        assert status["researchId"] == session.id
        assert status["status"] == "searching"
        assert status["subQuestions"] == [
            {"question": "Compare solar?", "status": "completed"},
            {"question": "wind energy?", "status": "pending"},
        ]
        assert status["steps"] == 3
        assert status["startTime"] == session.start_time.isoformat()
        assert status["endTime"] is None

    @pytest.mark.asyncio
    async def test_report_before_completion(self, orchestrator):
        session = await orchestrator.start("Compare solar and wind energy")
        with pytest.raises(StateError) as exc:
            await orchestrator.report(session.id)
        assert exc.value.message == "Research is not yet completed"

    @pytest.mark.asyncio
    async def test_report(self, orchestrator):
        session = await orchestrator.start("Compare solar and wind energy")
        await _run_to_completion(orchestrator, session.id)

        report = await orchestrator.report(session.id)

        assert report["report"] == session.report
        assert report["subQuestions"] == 2
        assert report["steps"] == 6
        assert report["duration"] >= 0
        assert report["endTime"] == session.end_time.isoformat()


class TestStepTypes:
    def test_step_type_values(self):
        assert [t.value for t in ResearchStepType] == [
            "question_analysis",
            "search",
            "result_analysis",
            "synthesis",
            "follow_up",
        ]
