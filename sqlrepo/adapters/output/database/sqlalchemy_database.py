"""SQLAlchemy-powered connection wrapper."""
from __future__ import annotations

import itertools
import json
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, TypeVar

from sqlalchemy import bindparam, create_engine, inspect, text
from sqlalchemy.engine import Connection, CursorResult, Engine, RootTransaction
from sqlalchemy.exc import SQLAlchemyError

from sqlrepo.domain.exceptions import DatabaseConnectionError, QueryError
from sqlrepo.domain.value_objects.bind_value import BindValue
from sqlrepo.domain.value_objects.connection_config import ConnectionConfig
from sqlrepo.ports.output.database import Database, Params
from sqlrepo.ports.output.logger import Logger

T = TypeVar('T')

TABLE_EXISTS_QUERY = (
  'SELECT 1 FROM information_schema.tables '
  'WHERE table_schema = :schema AND table_name = :table LIMIT 1'
)

# Quoted strings and identifiers are matched first so a `?` inside them is kept.
_POSITIONAL_MARKER = re.compile(
  r"'(?:[^'\\]|\\.)*'"
  r'|"(?:[^"\\]|\\.)*"'
  r'|`[^`]*`'
  r'|\?'
)


class SqlAlchemyDatabase(Database):
  """Lazily connected wrapper around a single SQLAlchemy connection.

  Statements outside :meth:`begin_transaction` / :meth:`commit` are committed
  as soon as their rows have been read. All values are sent as bound
  parameters, never interpolated into the SQL text.
  """

  def __init__(self, config: ConnectionConfig, logger: Optional[Logger] = None) -> None:
    self._config = config
    self._logger = logger
    self._engine: Optional[Engine] = None
    self._connection: Optional[Connection] = None
    self._transaction: Optional[RootTransaction] = None
    self._last_insert_id: Optional[Any] = None

  @property
  def config(self) -> ConnectionConfig:
    return self._config

  @property
  def is_connected(self) -> bool:
    return self._connection is not None

  # ------------------------------------------------------------------
  # Statements
  # ------------------------------------------------------------------

  def execute(self, query: str, params: Optional[Params] = None) -> int:
    def work(connection: Connection) -> int:
      result = self._send(connection, query, params)
      last_id = _last_row_id(result)
      if last_id:
        self._last_insert_id = last_id
      return result.rowcount

    return self._run('execute', query, params, work)

  def fetch_one(self, query: str, params: Optional[Params] = None) -> Optional[Dict[str, Any]]:
    def work(connection: Connection) -> Optional[Dict[str, Any]]:
      row = self._send(connection, query, params).mappings().first()
      return None if row is None else dict(row)

    return self._run('fetch_one', query, params, work)

  def fetch_all(self, query: str, params: Optional[Params] = None) -> List[Dict[str, Any]]:
    def work(connection: Connection) -> List[Dict[str, Any]]:
      return [dict(row) for row in self._send(connection, query, params).mappings().all()]

    return self._run('fetch_all', query, params, work)

  def fetch_column(
    self,
    query: str,
    params: Optional[Params] = None,
    column_index: int = 0,
  ) -> Any:
    def work(connection: Connection) -> Any:
      row = self._send(connection, query, params).first()
      if row is None:
        return None
      if not 0 <= column_index < len(row):
        raise IndexError(f'column index {column_index} out of range for {len(row)} columns')
      return row[column_index]

    return self._run('fetch_column', query, params, work)

  # ------------------------------------------------------------------
  # Transactions
  # ------------------------------------------------------------------

  def begin_transaction(self) -> bool:
    connection = self._get_connection()
    try:
      self._transaction = connection.begin()
    except SQLAlchemyError as exc:
      raise self._query_error('begin_transaction', exc) from exc
    return True

  def commit(self) -> bool:
    transaction = self._take_transaction('commit')
    try:
      transaction.commit()
    except SQLAlchemyError as exc:
      raise self._query_error('commit', exc) from exc
    return True

  def roll_back(self) -> bool:
    transaction = self._take_transaction('roll_back')
    try:
      transaction.rollback()
    except SQLAlchemyError as exc:
      raise self._query_error('roll_back', exc) from exc
    return True

  def transaction(self, callback: Callable[[Database], T]) -> T:
    """Run ``callback(self)`` inside a transaction.

    The transaction is committed when the callback returns and rolled back
    when it raises; the original exception always reaches the caller.
    """
    self.begin_transaction()
    try:
      value = callback(self)
      self.commit()
      return value
    except BaseException as exc:
      self._discard_transaction()
      self._log_error(f'Transaction failed: {exc}', {'exception': exc})
      raise

  # ------------------------------------------------------------------
  # Inspection
  # ------------------------------------------------------------------

  def table_exists(self, table_name: str) -> bool:
    if self._config.is_mysql:
      row = self.fetch_one(TABLE_EXISTS_QUERY, {
        'schema': self._config.database,
        'table': table_name,
      })
      return row is not None

    def work(connection: Connection) -> bool:
      return inspect(connection).has_table(table_name)

    return self._run('table_exists', f'has_table({table_name})', None, work)

  def get_last_insert_id(self) -> str:
    return '0' if self._last_insert_id is None else str(self._last_insert_id)

  # ------------------------------------------------------------------
  # Lifecycle
  # ------------------------------------------------------------------

  def close(self) -> None:
    if self._connection is None:
      return
    connection, engine = self._connection, self._engine
    self._connection = None
    self._engine = None
    self._transaction = None
    self._last_insert_id = None
    try:
      connection.close()
    finally:
      if engine is not None:
        engine.dispose()
    self._log_info('Database connection closed.')

  def _get_connection(self) -> Connection:
    if self._connection is not None:
      return self._connection

    engine: Optional[Engine] = None
    connection: Optional[Connection] = None
    try:
      engine = create_engine(self._config.to_url(), connect_args=self._config.connect_args())
      connection = engine.connect()
      self._prepare_session(connection)
    except (SQLAlchemyError, OSError) as exc:
      # OSError covers TLS material the driver cannot load (ssl.SSLError included).
      if connection is not None:
        connection.close()
      if engine is not None:
        engine.dispose()
      message = f'Failed to connect to database {self._config.describe()}: {_driver_message(exc)}'
      self._log_error(message, {'exception': exc})
      raise DatabaseConnectionError(message) from exc

    self._engine = engine
    self._connection = connection
    self._log_info(f'Connected to database: {self._config.describe()}')
    return connection

  def _prepare_session(self, connection: Connection) -> None:
    if self._config.is_mysql:
      connection.exec_driver_sql("SET NAMES 'utf8mb4'")
      connection.exec_driver_sql('SET CHARACTER SET utf8mb4')
      connection.commit()

  # ------------------------------------------------------------------
  # Helpers
  # ------------------------------------------------------------------

  def _run(
    self,
    operation: str,
    query: str,
    params: Optional[Params],
    work: Callable[[Connection], T],
  ) -> T:
    connection = self._get_connection()
    try:
      value = work(connection)
      if self._transaction is None:
        connection.commit()
      return value
    except (SQLAlchemyError, IndexError) as exc:
      if self._transaction is None and connection.in_transaction():
        connection.rollback()
      message = f'Database {operation} failed: {_driver_message(exc)}'
      self._log_error(message, {'query': query, 'params': params, 'exception': exc})
      raise QueryError(message, query=query, params=params) from exc

  def _send(self, connection: Connection, query: str, params: Optional[Params]) -> CursorResult:
    params = dict(params or {})
    self._log_debug(f'Preparing query: {query}')
    self._log_debug(f'With params: {json.dumps(params, default=str)}')

    if params and all(isinstance(key, int) for key in params):
      query, params = _name_positional(query, params)

    binds = [BindValue.of(str(name), value) for name, value in params.items()]
    statement = text(query).bindparams(*[
      bindparam(bind.name, bind.value, type_=bind.bind_type.sql_type())
      for bind in binds
    ])
    return connection.execute(statement)

  def _take_transaction(self, operation: str) -> RootTransaction:
    transaction = self._transaction
    self._transaction = None
    if transaction is None or not transaction.is_active:
      message = f'Database {operation} failed: there is no active transaction'
      self._log_error(message)
      raise QueryError(message)
    return transaction

  def _discard_transaction(self) -> None:
    transaction = self._transaction
    self._transaction = None
    if transaction is None or not transaction.is_active:
      return
    try:
      transaction.rollback()
    except SQLAlchemyError as exc:
      self._log_error(f'Rollback failed: {_driver_message(exc)}', {'exception': exc})

  def _query_error(self, operation: str, exc: SQLAlchemyError) -> QueryError:
    message = f'Database {operation} failed: {_driver_message(exc)}'
    self._log_error(message, {'exception': exc})
    return QueryError(message)

  def _log_info(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
    if self._logger is not None:
      self._logger.info(message, context or {})

  def _log_debug(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
    if self._logger is not None:
      self._logger.debug(message, context or {})

  def _log_error(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
    if self._logger is not None:
      self._logger.error(message, context or {})


def _driver_message(exc: BaseException) -> str:
  original = getattr(exc, 'orig', None)
  return str(original) if original is not None else str(exc)


def _name_positional(query: str, params: Dict[int, Any]) -> Tuple[str, Dict[str, Any]]:
  """Rewrite ``?`` markers as ``:_p0``, ``:_p1``... in ascending key order."""
  counter = itertools.count()

  def replace(match: re.Match) -> str:
    token = match.group(0)
    if token != '?':
      return token
    return f':_p{next(counter)}'

  named_query = _POSITIONAL_MARKER.sub(replace, query)
  named_params = {f'_p{index}': params[key] for index, key in enumerate(sorted(params))}
  return named_query, named_params


def _last_row_id(result: CursorResult) -> Any:
  try:
    return result.lastrowid
  except SQLAlchemyError:
    return None
