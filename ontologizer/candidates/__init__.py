"""Entity candidate generation (LLM path, heuristic fallback, post-processing)."""
