"""Command line tools for class belief maps."""
