"""Output formatting for CLI results (Rich for humans, JSON for machines)."""
