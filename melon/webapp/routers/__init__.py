"""
API routers for the webapp.
"""

from . import health, auth, profiles, posts, feeds, follows, notifications

__all__ = ["health", "auth", "profiles", "posts", "feeds", "follows", "notifications"]
