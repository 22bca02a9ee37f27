"""
FastAPI web application for Melon.
Provides API endpoints for the web frontend.
"""

import os
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from repositories.accounts_repo import AccountsRepository
from repositories.auth_session_repo import AuthSessionRepository
from services.auth_service import AuthService
from utils.logger import get_logger
from webapp.dependencies import set_session_cookie
from webapp.routers import auth, feeds, follows, health, notifications, posts, profiles

logger = get_logger(__name__)

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",  # Vite dev server
]

# Requests under these prefixes never touch the session
_STATIC_PREFIXES = ("/media/", "/assets/", "/favicon.ico")
_STATIC_SUFFIXES = (".svg", ".png", ".jpg", ".jpeg", ".gif", ".webp")


def _is_static_path(path: str) -> bool:
    return path.startswith(_STATIC_PREFIXES) or path.lower().endswith(_STATIC_SUFFIXES)


def create_webapp_api(
    root_dir: str,
    public_base_url: str = "",
    cors_origins: Optional[List[str]] = None,
    session_cookie_name: str = "melon_session",
    session_ttl_days: int = 7,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        root_dir: Root directory for app data; uploaded media lives in ``{root_dir}/media``
        public_base_url: Prefix of public media URLs (e.g. ``https://melon.example``)
        cors_origins: Allowed browser origins
        session_cookie_name: Name of the session cookie
        session_ttl_days: Sliding session lifetime

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Melon API",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or DEFAULT_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Store config in app state
    app.state.root_dir = root_dir
    app.state.public_base_url = (public_base_url or "").rstrip("/")
    app.state.session_cookie_name = session_cookie_name
    app.state.session_ttl_days = session_ttl_days
    app.state.auth_service = AuthService(
        AccountsRepository(),
        AuthSessionRepository(),
        session_ttl_days=session_ttl_days,
    )

    @app.middleware("http")
    async def refresh_session_cookie(request: Request, call_next):
        """Slide the session expiry forward on every non-static request."""
        response = await call_next(request)
        if _is_static_path(request.url.path):
            return response

        token = request.cookies.get(session_cookie_name)
        if not token or session_cookie_name in response.headers.get("set-cookie", ""):
            return response

        try:
            session = app.state.auth_service.refresh_session(token)
        except Exception as e:
            logger.warning(f"Session refresh failed: {e}")
            return response

        if session is None:
            response.delete_cookie(session_cookie_name, path="/")
        else:
            set_session_cookie(response, session_cookie_name, session.session_token, session_ttl_days)
        return response

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(profiles.router)
    app.include_router(posts.router)
    app.include_router(feeds.router)
    app.include_router(follows.router)
    app.include_router(notifications.router)

    media_dir = os.path.join(root_dir, "media")
    os.makedirs(media_dir, exist_ok=True)
    app.mount("/media", StaticFiles(directory=media_dir), name="media")

    logger.info(f"Melon API created (root_dir={root_dir})")
    return app

