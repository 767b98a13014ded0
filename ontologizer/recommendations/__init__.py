"""Content recommendations (LLM path with heuristic fallback)."""
