"""Command-line interface for soundsprite."""
