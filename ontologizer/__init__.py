"""Ontologizer - entity extraction, enrichment and JSON-LD synthesis."""

# Lazy imports to avoid requiring all dependencies at import time
# Use explicit imports when these are needed:
# from ontologizer.pipeline.processor import OntologizerProcessor
# from ontologizer.pipeline.context import AnalysisContext

from typing import Any

__all__ = [
    "OntologizerProcessor",
    "AnalysisContext",
]


def __getattr__(name: str) -> Any:
    """Lazy import for the processing pipeline."""
    if name == "OntologizerProcessor":
        from ontologizer.pipeline.processor import OntologizerProcessor

        return OntologizerProcessor
    if name == "AnalysisContext":
        from ontologizer.pipeline.context import AnalysisContext

        return AnalysisContext
    raise AttributeError(f"module 'ontologizer' has no attribute '{name}'")
