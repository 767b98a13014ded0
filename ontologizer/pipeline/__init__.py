"""End-to-end page analysis pipeline."""
