"""Exceptions raised by the data-access layer."""
from __future__ import annotations

from typing import Any, Mapping, Optional


class SqlRepoError(Exception):
  """Base exception for the sqlrepo package."""

  def __init__(self, message: str = '') -> None:
    self.message = message
    super().__init__(self.message)


class DatabaseConnectionError(SqlRepoError):
  """Raised when a connection to the database cannot be established."""


class QueryError(SqlRepoError):
  """Raised when a statement fails to prepare or execute."""

  def __init__(
    self,
    message: str = '',
    query: Optional[str] = None,
    params: Optional[Mapping[Any, Any]] = None,
  ) -> None:
    self.query = query
    self.params = dict(params) if params else {}
    super().__init__(message)


class ValidationError(SqlRepoError):
  """Raised when a call is rejected before reaching the database."""


class NotFoundError(SqlRepoError):
  """Raised when a lookup by primary key matches no row."""

  def __init__(self, table: str, column: str, record_id: Any) -> None:
    self.table = table
    self.column = column
    self.record_id = record_id
    super().__init__(f'No record found in [{table}] where [{column} = {record_id}].')
