"""Command-line tools for running and previewing consolidations."""
