"""Main entry point for the puzzle trainer."""
from chesstrainer.cli import app

if __name__ == "__main__":
    app()
