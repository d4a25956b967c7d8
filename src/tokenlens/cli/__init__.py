"""Command-line entry points for tokenlens."""
