"""Deep Research - decomposed, cited web research sessions."""

__version__ = "0.1.0"
