"""
Pytest configuration and shared fixtures.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import pytest

from sqlrepo.adapters.output.database.sqlalchemy_database import SqlAlchemyDatabase
from sqlrepo.domain.value_objects.connection_config import ConnectionConfig


class RecordingLogger:
  """Logger port implementation that keeps every call."""

  def __init__(self) -> None:
    self.records: List[Tuple[str, str, Dict[str, Any]]] = []

  def info(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
    self.records.append(('info', message, dict(context or {})))

  def debug(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
    self.records.append(('debug', message, dict(context or {})))

  def error(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
    self.records.append(('error', message, dict(context or {})))

  def messages(self, level: str) -> List[str]:
    return [message for record_level, message, _ in self.records if record_level == level]


class FakeDatabase:
  """In-memory Database port that records statements and replays canned results."""

  def __init__(self) -> None:
    self.calls: List[Tuple[str, str, Dict[Any, Any]]] = []
    self.rows: List[Dict[str, Any]] = []
    self.row: Optional[Dict[str, Any]] = None
    self.affected = 1
    self.last_insert_id = '0'
    self.closed = False

  def execute(self, query: str, params: Optional[Mapping[Any, Any]] = None) -> int:
    self.calls.append(('execute', query, dict(params or {})))
    return self.affected

  def fetch_one(self, query: str, params: Optional[Mapping[Any, Any]] = None) -> Optional[Dict[str, Any]]:
    self.calls.append(('fetch_one', query, dict(params or {})))
    return self.row

  def fetch_all(self, query: str, params: Optional[Mapping[Any, Any]] = None) -> List[Dict[str, Any]]:
    self.calls.append(('fetch_all', query, dict(params or {})))
    return list(self.rows)

  def fetch_column(self, query: str, params: Optional[Mapping[Any, Any]] = None, column_index: int = 0) -> Any:
    self.calls.append(('fetch_column', query, dict(params or {})))
    if self.row is None:
      return None
    return list(self.row.values())[column_index]

  def begin_transaction(self) -> bool:
    return True

  def commit(self) -> bool:
    return True

  def roll_back(self) -> bool:
    return True

  def transaction(self, callback: Callable[[Any], Any]) -> Any:
    return callback(self)

  def table_exists(self, table_name: str) -> bool:
    self.calls.append(('table_exists', table_name, {}))
    return self.row is not None

  def get_last_insert_id(self) -> str:
    return self.last_insert_id

  def close(self) -> None:
    self.closed = True

  @property
  def last_call(self) -> Tuple[str, str, Dict[Any, Any]]:
    return self.calls[-1]


USERS_DDL = """
  CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT NOT NULL UNIQUE,
    status TEXT NOT NULL,
    age INTEGER,
    is_admin BOOLEAN NOT NULL DEFAULT 0
  )
"""


@pytest.fixture
def fake_db():
  """A recording fake of the Database port."""
  return FakeDatabase()


@pytest.fixture
def recording_logger():
  return RecordingLogger()


@pytest.fixture
def sqlite_config(tmp_path):
  """Connection settings for a throwaway SQLite database file."""
  return ConnectionConfig(
    host='',
    database=str(tmp_path / 'sqlrepo_test.sqlite'),
    user='',
    password='',
    port=None,
    driver='sqlite',
  )


@pytest.fixture
def sqlite_db(sqlite_config, recording_logger):
  """A SqlAlchemyDatabase over SQLite with an empty ``users`` table."""
  db = SqlAlchemyDatabase(sqlite_config, logger=recording_logger)
  db.execute(USERS_DDL)
  yield db
  db.close()


@pytest.fixture
def seeded_db(sqlite_db):
  """``sqlite_db`` with four users inserted."""
  users = [
    {'username': 'alice', 'status': 'active', 'age': 30, 'is_admin': True},
    {'username': 'bob', 'status': 'active', 'age': 17, 'is_admin': False},
    {'username': 'carol', 'status': 'inactive', 'age': 45, 'is_admin': False},
    {'username': 'dave', 'status': 'banned', 'age': 70, 'is_admin': False},
  ]
  for user in users:
    sqlite_db.execute(
      'INSERT INTO users (username, status, age, is_admin) VALUES (:username, :status, :age, :is_admin)',
      user,
    )
  return sqlite_db
