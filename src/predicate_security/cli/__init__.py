"""Command-line interface for predicate-security."""
