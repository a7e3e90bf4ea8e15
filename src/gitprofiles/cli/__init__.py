"""Command-line interface for gitprofiles."""
