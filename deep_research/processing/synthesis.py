"""
Report synthesis.

Assembles per-sub-question analyses and their sources into one cited
markdown report.
"""

from typing import Sequence

from deep_research.core.session.models import SubQuestion
from deep_research.processing.question import clean_question, extract_main_topic
from deep_research.services.search.models import SearchResult
from deep_research.utils.logging import get_logger

logger = get_logger(__name__)


def in_progress_message(main_question: str) -> str:
    return f'Research is still in progress for question: "{main_question}"'


def _introduction(main_question: str) -> str:
    return (
        f'This report presents a comprehensive analysis of the question: "{main_question}".\n'
        "The research was conducted using multiple sources and approaches to provide "
        "a thorough understanding of the topic."
    )


def _citations(results: Sequence[SearchResult]) -> str:
    if not results:
        return ""
    lines = [f"[{i}] {r.title} - {r.url}" for i, r in enumerate(results, start=1)]
    return "**Sources:**\n" + "\n".join(lines)


def _section(sub_question: SubQuestion) -> str:
    title = sub_question.question.replace("?", "").strip()
    body = f"## {title}\n\n{sub_question.analysis}"
    citations = _citations(sub_question.search_results or [])
    if citations:
        body += f"\n\n{citations}"
    return body


def _conclusion(main_question: str, used: int) -> str:
    topic = extract_main_topic(main_question) or clean_question(main_question)
    return (
        f"This research has explored various aspects of {topic}.\n"
        "The findings from different sub-questions provide a comprehensive "
        "understanding of the topic.\n"
        f"The research was based on {used} sub-questions and utilized multiple "
        "sources to ensure accuracy and depth."
    )


def collect_sources(sub_questions: Sequence[SubQuestion]) -> list[tuple[str, str]]:
    """Union of (title, url) pairs keyed by url, in first-seen order."""
    sources: dict[str, str] = {}
    for sq in sub_questions:
        for result in sq.search_results or []:
            sources.setdefault(result.url, result.title)
    return [(title, url) for url, title in sources.items()]


def synthesize_report(main_question: str, sub_questions: Sequence[SubQuestion]) -> str:
    """
    Build the final research report.

    Only completed sub-questions with an analysis contribute; when there
    are none the in-progress placeholder is returned instead.
    """
    completed = [sq for sq in sub_questions if sq.is_completed and sq.analysis]
    if not completed:
        return in_progress_message(main_question)

    sections = "\n\n".join(_section(sq) for sq in completed)
    sources = "\n".join(
        f"{i}. {title} - {url}"
        for i, (title, url) in enumerate(collect_sources(completed), start=1)
    )

    logger.debug(f"Synthesized report from {len(completed)} sub-questions")

    return (
        f"# Research Report: {main_question}\n"
        "\n"
        "## Introduction\n"
        f"{_introduction(main_question)}\n"
        "\n"
        f"{sections}\n"
        "\n"
        "## Conclusion\n"
        f"{_conclusion(main_question, len(completed))}\n"
        "\n"
        "## Sources\n"
        f"{sources}\n"
    )
