"""Main entry point for soundsprite."""

from soundsprite.cli.main import cli

if __name__ == "__main__":
    cli()
