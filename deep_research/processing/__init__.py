"""Content Processing - Decomposition, Scoring, Analysis, Synthesis."""
from .question import decompose_question, extract_main_topic
from .scorer import calculate_relevance
from .analysis import analyze_results
from .synthesis import synthesize_report

__all__ = [
    "decompose_question",
    "extract_main_topic",
    "calculate_relevance",
    "analyze_results",
    "synthesize_report",
]
