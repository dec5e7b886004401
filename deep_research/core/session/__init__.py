"""Research session state."""
from .models import (
    ResearchSession,
    ResearchStatus,
    ResearchStep,
    ResearchStepType,
    SubQuestion,
    SubQuestionStatus,
)

__all__ = [
    "ResearchSession",
    "ResearchStatus",
    "ResearchStep",
    "ResearchStepType",
    "SubQuestion",
    "SubQuestionStatus",
]
