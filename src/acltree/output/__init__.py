"""Output formatting for CLI results (human, quiet, JSON)."""
