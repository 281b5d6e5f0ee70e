"""Create the sqlite file and bring its schema to the alembic head."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from time import monotonic
from typing import Optional

from alembic import command
from alembic.config import Config as AlembicConfig
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import SQLAlchemyError

from reftrends.config import Settings

logger = logging.getLogger(__name__)

ALEMBIC_DIR = Path(__file__).resolve().parent.parent / "alembic"


def alembic_config(db_path: str) -> AlembicConfig:
    """Alembic config for one database file, using the sync sqlite driver."""
    cfg = AlembicConfig(str(ALEMBIC_DIR / "alembic.ini"))
    cfg.set_main_option("script_location", str(ALEMBIC_DIR))
    cfg.set_main_option("sqlalchemy.url", f"sqlite:///{os.path.abspath(db_path)}")
    cfg.attributes["configure_logger"] = False
    return cfg


def current_revision(db_path: str) -> Optional[str]:
    """Revision stamped in the database, or None for a fresh file."""
    engine = create_engine(f"sqlite:///{os.path.abspath(db_path)}")
    try:
        with engine.connect() as connection:
            if "alembic_version" not in inspect(connection).get_table_names():
                return None
            return connection.execute(text("select version_num from alembic_version limit 1")).scalar()
    except SQLAlchemyError:
        return None
    finally:
        engine.dispose()


def upgrade_database(db_path: str) -> Optional[str]:
    """Run `alembic upgrade head` unless the file is already there; returns the head."""
    cfg = alembic_config(db_path)
    head = ScriptDirectory.from_config(cfg).get_current_head()
    current = current_revision(db_path)
    if head is not None and current == head:
        logger.debug({"db": {"event": "schema_current", "path": db_path, "revision": head}})
        return head

    started = monotonic()
    try:
        command.upgrade(cfg, "head")
    except Exception as exc:
        logger.error({"db": {"event": "upgrade_failed", "path": db_path, "error": str(exc)}})
        raise
    logger.info(
        {
            "db": {
                "event": "upgraded",
                "path": db_path,
                "from": current,
                "to": head,
                "seconds": round(monotonic() - started, 3),
            }
        }
    )
    return head


def initialize(settings: Settings, db_path: str | None = None) -> str:
    """Make sure the database file exists and is migrated; returns its absolute path."""
    path = os.path.abspath(db_path or settings.database.database_path())
    os.makedirs(os.path.dirname(path), exist_ok=True)
    if not os.path.exists(path):
        logger.info({"db": {"event": "created", "path": path}})
        Path(path).touch()
    upgrade_database(path)
    return path


__all__ = ["ALEMBIC_DIR", "alembic_config", "current_revision", "initialize", "upgrade_database"]
