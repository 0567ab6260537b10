"""
Main entry point for the RichUp relay server.

Usage:
    python -m server.main

Or:
    richup-server
"""

from server.network.server import main


if __name__ == "__main__":
    main()
