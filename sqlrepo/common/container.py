"""Simple dependency wiring helpers."""
from __future__ import annotations

from typing import Optional

from sqlrepo.adapters.output.database.sqlalchemy_database import SqlAlchemyDatabase
from sqlrepo.adapters.output.logging.stdlib_logger import StdlibLogger
from sqlrepo.common.config import Settings, get_settings
from sqlrepo.common.logging import get_logger


def create_database(settings: Optional[Settings] = None) -> SqlAlchemyDatabase:
  settings = settings or get_settings()
  logger = StdlibLogger(get_logger('sqlrepo.database'))
  return SqlAlchemyDatabase(settings.connection_config(), logger=logger)
