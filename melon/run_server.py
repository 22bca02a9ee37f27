#!/usr/bin/env python3
"""
Run the Melon API server.

Usage:
    python melon/run_server.py

Environment Variables (a .env file in the working directory is loaded first):
    ROOT_DIR: Root directory for app data and uploaded media (default: ./MELON_DATA_DIR)
    PUBLIC_BASE_URL: Prefix of public media URLs (default: http://localhost:PORT)
    DATABASE_URL / DATABASE_URL_STAGING / DATABASE_URL_PROD: SQLAlchemy database URL
    CREATE_SCHEMA: Create missing tables on startup instead of relying on Alembic (default: 0)
    CORS_ORIGINS: Comma-separated allowed origins
    SESSION_COOKIE_NAME: Session cookie name (default: melon_session)
    SESSION_TTL_DAYS: Sliding session lifetime in days (default: 7)
    HOST: Server host (default: 0.0.0.0)
    PORT: Server port (default: 8000)
"""

import os
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

# Make the app packages importable when run as a script
sys.path.insert(0, str(Path(__file__).parent))

from db.schema import ensure_schema
from utils.logger import get_logger
from webapp.api import create_webapp_api

logger = get_logger(__name__)


def _split_origins(value: str):
    return [o.strip() for o in value.split(",") if o.strip()] or None


def build_app():
    """Create the app from environment configuration."""
    root_dir = os.path.abspath(os.getenv("ROOT_DIR", "./MELON_DATA_DIR"))
    port = int(os.getenv("PORT", "8000"))
    os.makedirs(root_dir, exist_ok=True)

    if os.getenv("CREATE_SCHEMA", "0").lower() in ("1", "true", "yes"):
        ensure_schema()
        logger.info("Database schema ensured")

    return create_webapp_api(
        root_dir=root_dir,
        public_base_url=os.getenv("PUBLIC_BASE_URL", f"http://localhost:{port}"),
        cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "")),
        session_cookie_name=os.getenv("SESSION_COOKIE_NAME", "melon_session"),
        session_ttl_days=int(os.getenv("SESSION_TTL_DAYS", "7")),
    )


def main():
    """Main entry point."""
    load_dotenv()

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))

    logger.info("Starting Melon API server...")
    logger.info(f"  Root directory: {os.getenv('ROOT_DIR', './MELON_DATA_DIR')}")
    logger.info(f"  Host: {host}")
    logger.info(f"  Port: {port}")

    try:
        app = build_app()
        uvicorn.run(app, host=host, port=port, log_level="info")
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Error starting server: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
