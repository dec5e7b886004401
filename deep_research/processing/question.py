"""
Question decomposition.

Splits a research question into ordered sub-questions using connector
words, or falls back to templated aspect questions about the main topic.
"""

import re
from typing import Optional

from deep_research.utils.logging import get_logger

logger = get_logger(__name__)


DEFAULT_MAX_SUB_QUESTIONS = 5
MAX_SUB_QUESTIONS_CAP = 10

# Presence of any of these marks a compound question
CONNECTORS = ("and", "or", "versus", "vs", "compared to", "differences between")

# Single alternation; re.split cuts on every occurrence in one pass
CONNECTOR_SPLIT = re.compile(r"\s+(?:and|or|versus|vs|compared to)\s+", re.IGNORECASE)

INTERROGATIVES = ("what", "who", "when", "where", "why", "how")
AUXILIARIES = (
    "is", "are", "was", "were", "do", "does", "did",
    "can", "could", "would", "should", "will",
)

# An interrogative with an optional trailing auxiliary ("what is", "how does"),
# or a bare auxiliary ("is", "can")
LEADING_QUESTION_WORDS = re.compile(
    r"^(?:(?:{q})(?:\s+(?:{a}))?|(?:{a}))\s+".format(
        q="|".join(INTERROGATIVES), a="|".join(AUXILIARIES)
    ),
    re.IGNORECASE,
)
LEADING_ARTICLE = re.compile(r"^(?:the|a|an)\s+", re.IGNORECASE)

ASPECT_TEMPLATES = (
    "What is {topic}?",
    "What are the key features of {topic}?",
    "What are the applications of {topic}?",
)


def clean_question(question: str) -> str:
    """Strip surrounding whitespace and trailing question marks."""
    return question.strip().rstrip("?").strip()


def extract_main_topic(question: str) -> Optional[str]:
    """
    Extract the main topic of a question.

    Removes one leading interrogative phrase and then one leading article.

    Returns:
        The topic, or None when nothing is left.
    """
    topic = LEADING_QUESTION_WORDS.sub("", clean_question(question), count=1).strip()
    topic = LEADING_ARTICLE.sub("", topic, count=1).strip()
    return topic or None


def clamp_max_sub_questions(value: Optional[int]) -> int:
    """Apply the default and the hard cap to a requested sub-question count."""
    if value is None:
        return DEFAULT_MAX_SUB_QUESTIONS
    return max(1, min(int(value), MAX_SUB_QUESTIONS_CAP))


def _split_on_connectors(cleaned: str) -> list[str]:
    lowered = cleaned.lower()
    if not any(connector in lowered for connector in CONNECTORS):
        return []

    parts = [part.strip() for part in CONNECTOR_SPLIT.split(cleaned)]
    parts = [part for part in parts if part]
    if len(parts) < 2:
        return []
    return [f"{part}?" for part in parts]


def _dedupe(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def decompose_question(
    question: str,
    max_sub_questions: int = DEFAULT_MAX_SUB_QUESTIONS,
) -> list[str]:
    """
    Break a question down into ordered, unique sub-questions.

    Args:
        question: The main research question
        max_sub_questions: Upper bound on the result size (capped at 10)

    Returns:
        Sub-question strings in first-seen order
    """
    limit = clamp_max_sub_questions(max_sub_questions)
    cleaned = clean_question(question)

    sub_questions = _split_on_connectors(cleaned)
    if sub_questions:
        logger.debug(f"Split compound question into {len(sub_questions)} parts")
    else:
        sub_questions = [question.strip()]
        topic = extract_main_topic(cleaned)
        if topic:
            sub_questions.extend(t.format(topic=topic) for t in ASPECT_TEMPLATES)

    return _dedupe(sub_questions)[:limit]
