#!/usr/bin/env python3
"""
FastAPI webapp module for running with uvicorn.

Usage:
    uvicorn run_webapp_local:app --host 0.0.0.0 --port 8000 --reload

Configuration is read from the environment and .env (see melon/run_server.py).
Local runs default to a SQLite database under ROOT_DIR with tables created on startup.
"""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add melon to path
sys.path.insert(0, str(Path(__file__).parent / "melon"))

load_dotenv()

_root_dir = os.path.abspath(os.getenv("ROOT_DIR", str(Path(__file__).parent / "MELON_DATA_DIR")))
os.environ.setdefault("ROOT_DIR", _root_dir)
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_root_dir, 'melon.db')}")
os.environ.setdefault("CREATE_SCHEMA", "1")

from run_server import build_app  # noqa: E402
from utils.logger import get_logger  # noqa: E402

logger = get_logger(__name__)

# Create FastAPI app instance (exposed for uvicorn)
app = build_app()

logger.info("Melon API module loaded")
logger.info(f"  Root directory: {_root_dir}")
logger.info("  API docs: http://localhost:8000/api/docs")
