"""Mini README: Interfaces (HTTP API) for LandTrack.

Exports the FastAPI application factory the UI screens call into. The CLI
entry point lives in ``landtrack_cli.py`` at the repository root.
"""

from .web_app import create_application

__all__ = ["create_application"]
