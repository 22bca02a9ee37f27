"""
Melon web application.
Provides the FastAPI JSON API for the web frontend.
"""

from webapp.api import create_webapp_api

__all__ = ["create_webapp_api"]
