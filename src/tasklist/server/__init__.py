"""HTTP server for the Tasklist API.

Usage:
    tasklist serve

Architecture:
    Client --cookie--> FastAPI --> TaskStore / UserStore --> *.db files
"""

from tasklist.server.main import create_app

__all__ = ["create_app"]
