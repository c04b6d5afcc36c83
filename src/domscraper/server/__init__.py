"""
domscraper Server Module.

Provides the HTTP API.
"""

from domscraper.server.app import create_app

__all__ = ["create_app"]
