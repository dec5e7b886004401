"""
Research Components Package.

Search invocation and the session orchestrator.
"""

from .invoker import SearchInvoker
from .orchestrator import ContinueOutcome, ResearchOrchestrator

__all__ = ["SearchInvoker", "ContinueOutcome", "ResearchOrchestrator"]
