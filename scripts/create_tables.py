"""Create the state table in the configured database.

Reads DATABASE_URL (or PG* variables) from .env / environment.

Usage:
  python scripts/create_tables.py
  python scripts/create_tables.py --reset-winners
"""

from __future__ import annotations

import argparse
import logging
import pathlib
import sys

from dotenv import load_dotenv
from sqlalchemy.orm import Session

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from luckydraw.config import resolve_database_url
from luckydraw.db import create_app_engine
from luckydraw.models.base import Base
from luckydraw.services.lottery_service import LotteryService

# Import models so they register with Base.metadata
from luckydraw import models  # noqa: F401


logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Create all ORM tables, optionally clearing the winner list."""

    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--reset-winners", action="store_true", help="clear the stored winner list")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    load_dotenv()
    env_local = PROJECT_ROOT / ".env.local"
    if env_local.exists():
        load_dotenv(dotenv_path=env_local, override=True)

    engine = create_app_engine(resolve_database_url())
    Base.metadata.create_all(bind=engine)
    logger.info("Tables created (or already exist).")

    if args.reset_winners:
        with Session(engine) as session, session.begin():
            LotteryService().reset(session)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
