"""Command-line entry point for the MonScreener server."""

from monscreener.main import main

if __name__ == "__main__":
    main()
