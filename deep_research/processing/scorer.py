"""
Relevance scoring.

Token-overlap heuristics used to rank search results and to pick
representative sentences from result descriptions.
"""

from deep_research.utils.logging import get_logger

logger = get_logger(__name__)


MIN_TOKEN_LENGTH = 3

STOP_WORDS = frozenset({
    "a", "an", "the", "and", "or", "but", "if", "because", "as", "what",
    "which", "this", "that", "these", "those", "then", "just", "so", "than",
    "such", "both", "through", "about", "for", "is", "of", "while", "during",
    "to", "from", "in", "out", "on", "off", "over", "under", "again", "further",
    "once", "here", "there", "when", "where", "why", "how", "all", "any",
    "each", "few", "more", "most", "other", "some", "no", "nor",
    "not", "only", "own", "same", "too", "very", "s", "t", "can",
    "will", "don", "should", "now",
})

# Title hits weigh three times a description hit
TITLE_WEIGHT = 3
DESCRIPTION_WEIGHT = 1

SENTENCE_MATCH_WEIGHT = 0.7
SENTENCE_LENGTH_WEIGHT = 0.3
IDEAL_SENTENCE_LENGTH = 100


def tokenize(text: str, drop_stop_words: bool = False) -> list[str]:
    """Lowercase and split on whitespace, keeping words longer than two characters."""
    tokens = [word for word in text.lower().split() if len(word) >= MIN_TOKEN_LENGTH]
    if drop_stop_words:
        tokens = [word for word in tokens if word not in STOP_WORDS]
    return tokens


def calculate_relevance(query: str, title: str, description: str) -> float:
    """
    Score how well a result matches a query.

    Each query token is counted once if it occurs anywhere in the title and
    once if it occurs anywhere in the description.

    Returns:
        Relevance in [0.0, 1.0]; 0.0 when the query has no usable tokens
    """
    tokens = tokenize(query)
    if not tokens:
        return 0.0

    normalized_title = (title or "").lower()
    normalized_description = (description or "").lower()

    title_matches = sum(1 for token in tokens if token in normalized_title)
    description_matches = sum(1 for token in tokens if token in normalized_description)

    max_score = len(tokens) * (TITLE_WEIGHT + DESCRIPTION_WEIGHT)
    return (title_matches * TITLE_WEIGHT + description_matches * DESCRIPTION_WEIGHT) / max_score


def score_sentence(sentence: str, query: str) -> float:
    """
    Score a sentence for use as a representative excerpt.

    Combines the share of meaningful query words found in the sentence with
    a length factor that peaks at 100 characters.
    """
    normalized = sentence.lower()
    tokens = tokenize(query, drop_stop_words=True)

    if tokens:
        match_ratio = sum(1 for token in tokens if token in normalized) / len(tokens)
    else:
        match_ratio = 0.0

    length_penalty = min(abs(len(normalized) - IDEAL_SENTENCE_LENGTH) / IDEAL_SENTENCE_LENGTH, 0.5)
    return match_ratio * SENTENCE_MATCH_WEIGHT + (1 - length_penalty) * SENTENCE_LENGTH_WEIGHT
