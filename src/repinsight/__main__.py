"""Main entry point for RepInsight (``python -m repinsight``)."""

from .cli import main

if __name__ == "__main__":
    main()
