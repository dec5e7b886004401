"""
Search result analysis.

Ranks the results gathered for one sub-question and extracts the most
representative sentences from each.
"""

import re
from typing import Sequence

from deep_research.processing.scorer import score_sentence
from deep_research.services.search.models import SearchResult
from deep_research.utils.logging import get_logger

logger = get_logger(__name__)


TOP_RESULTS = 5
SENTENCES_PER_RESULT = 2

SENTENCE_TERMINATORS = re.compile(r"[.!?]+")


def rank_results(results: Sequence[SearchResult]) -> list[SearchResult]:
    """Order results by relevance, highest first; ties keep input order."""
    return sorted(results, key=lambda r: r.relevance, reverse=True)


def select_relevant_sentences(
    text: str,
    query: str,
    max_sentences: int = SENTENCES_PER_RESULT,
) -> list[str]:
    """
    Pick the sentences of ``text`` that best represent ``query``.

    Falls back to the whole text when it holds no non-blank sentence.
    """
    sentences = [s for s in SENTENCE_TERMINATORS.split(text) if s.strip()]
    if not sentences:
        return [text]

    scored = [(score_sentence(sentence, query), sentence) for sentence in sentences]
    # sorted() is stable, so equal scores keep sentence order
    scored = sorted(scored, key=lambda item: item[0], reverse=True)
    return [sentence.strip() for _, sentence in scored[:max_sentences]]


def analyze_results(
    results: Sequence[SearchResult],
    query: str,
    top_n: int = TOP_RESULTS,
    sentences_per_result: int = SENTENCES_PER_RESULT,
) -> str:
    """
    Summarize search results for a sub-question.

    Args:
        results: Scored results for the sub-question
        query: The sub-question text
        top_n: Number of top-ranked results to use
        sentences_per_result: Sentences extracted per result

    Returns:
        A numbered plain-text analysis
    """
    if not results:
        return f'No results found for query: "{query}"'

    top_results = rank_results(results)[:top_n]

    points = []
    for index, result in enumerate(top_results, start=1):
        key_info = " ".join(
            select_relevant_sentences(result.description, query, sentences_per_result)
        )
        points.append(f"{index}. {result.title}\n   {key_info}\n   Source: {result.url}")

    logger.debug(f"Analyzed {len(top_results)} of {len(results)} results for '{query}'")

    return (
        f'Analysis for query: "{query}"\n'
        "\n"
        "Key Information:\n"
        + "\n\n".join(points)
        + "\n\n"
        f"This analysis is based on the top {len(top_results)} most relevant results.\n"
    )
