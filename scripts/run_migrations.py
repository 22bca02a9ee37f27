#!/usr/bin/env python3
"""
Run the Melon Alembic migrations against the production and/or staging database.

DATABASE_URL_PROD and DATABASE_URL_STAGING are read from the environment,
after loading the env files named by MELON_ENV_PROD / MELON_ENV_STAGING
(defaults: .env.prod and .env.staging in the working directory).

Usage:
    python scripts/run_migrations.py            # both databases
    python scripts/run_migrations.py --prod     # production only
    python scripts/run_migrations.py --staging  # staging only
"""

import argparse
import os
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config
from dotenv import load_dotenv
from sqlalchemy import create_engine, func, inspect, select, table

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root / "melon"))

from utils.logger import get_logger  # noqa: E402

logger = get_logger("run_migrations")


def _load_env_files() -> None:
    """Load prod and staging env files. Variables already set are kept."""
    for var, default in (("MELON_ENV_PROD", ".env.prod"), ("MELON_ENV_STAGING", ".env.staging")):
        path = Path(os.getenv(var, default))
        if path.exists():
            logger.info(f"Loading env file: {path}")
            load_dotenv(path, override=False)
        else:
            logger.info(f"Env file not found, skipping: {path}")


def _log_table_counts(database_url: str) -> None:
    engine = create_engine(database_url)
    try:
        with engine.connect() as conn:
            for name in sorted(inspect(conn).get_table_names()):
                count = conn.execute(select(func.count()).select_from(table(name))).scalar()
                logger.info(f"  {name:<20} {count:>10,} rows")
    except Exception as e:
        logger.warning(f"Could not list table counts: {e}")
    finally:
        engine.dispose()


def run_migrations_for(label: str, database_url: str) -> bool:
    """Upgrade one database to head. Returns True on success."""
    alembic_ini = project_root / "alembic.ini"
    safe_url = database_url.split("@")[1] if "@" in database_url else "***"
    logger.info(f"[{label}] upgrading {safe_url}")

    # env.py resolves the URL from the environment
    old_url = os.environ.get("DATABASE_URL")
    old_environment = os.environ.pop("ENVIRONMENT", None)
    os.environ["DATABASE_URL"] = database_url
    saved ={var: os.environ.pop(var) for var in ("DATABASE_URL_PROD", "DATABASE_URL_STAGING") if var in os.environ}

    try:
        alembic_cfg = Config(str(alembic_ini))
        alembic_cfg.set_main_option("script_location", str(project_root / "melon" / "db" / "alembic"))
        command.upgrade(alembic_cfg, "head")
        logger.info(f"[{label}] migrations completed")
        _log_table_counts(database_url)
        return True
    except Exception as e:
        logger.exception(f"[{label}] migration failed: {e}")
        return False
    finally:
        os.environ.update(saved)
        if old_environment is not None:
            os.environ["ENVIRONMENT"] = old_environment
        if old_url is None:
            os.environ.pop("DATABASE_URL", None)
        else:
            os.environ["DATABASE_URL"] = old_url


def main() -> int:
    parser = argparse.ArgumentParser(description="Run Alembic migrations against prod and/or staging.")
    parser.add_argument("--prod", action="store_true", help="Run only against the production DB")
    parser.add_argument("--staging", action="store_true", help="Run only against the staging DB")
    args = parser.parse_args()

    both = not args.prod and not args.staging
    targets = []
    if args.prod or both:
        targets.append(("PRODUCTION", "DATABASE_URL_PROD"))
    if args.staging or both:
        targets.append(("STAGING", "DATABASE_URL_STAGING"))

    _load_env_files()

    results = []
    for label, var in targets:
        url = os.getenv(var)
        if not url:
            logger.warning(f"[{label}] skipped: {var} not set")
            results.append((label, False))
            continue
        results.append((label, run_migrations_for(label, url)))

    for label, ok in results:
        logger.info(f"{'OK    ' if ok else 'FAILED'} {label}")
    return 0 if all(ok for _, ok in results) else 1


if __name__ == "__main__":
    sys.exit(main())
