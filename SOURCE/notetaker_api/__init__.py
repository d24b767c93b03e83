"""
Notetaker API package.

Exposes the application factory so that scripts and the server entry
point can import `create_app` without causing circular imports.
"""

from .app import create_app

__all__ = ["create_app"]
