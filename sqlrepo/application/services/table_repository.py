"""Table-scoped CRUD operations and a small fluent query builder."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from sqlrepo.domain.entities.query_state import (
  BuilderState,
  Conjunction,
  QueryCondition,
  SortDirection,
  SortOrder,
)
from sqlrepo.domain.exceptions import NotFoundError, ValidationError
from sqlrepo.domain.services.select_compiler import CompiledQuery, SelectCompiler, quote_identifier
from sqlrepo.ports.output.database import Database

Row = Dict[str, Any]


class TableRepository:
  """CRUD access to one table keyed by a single primary-key column.

  ``where``/``or_where``/``order_by``/``limit``/``offset`` collect state on
  the instance and return it for chaining. :meth:`get` (and :meth:`all`
  when state is present) clears that state after running; :meth:`count` and
  :meth:`exists` leave it in place.

  Usage::

    users = TableRepository(db, 'users')
    rows = users.where('status', '=', 'active').order_by('created_at', 'desc').limit(5).get()
  """

  def __init__(
    self,
    db: Database,
    table: str,
    primary_key: str = 'id',
    compiler: Optional[SelectCompiler] = None,
  ) -> None:
    self._db = db
    self._table = table
    self._primary_key = primary_key
    self._compiler = compiler or SelectCompiler()
    self._state = BuilderState()

  @property
  def table(self) -> str:
    return self._table

  @property
  def primary_key(self) -> str:
    return self._primary_key

  @property
  def state(self) -> BuilderState:
    return self._state

  # ------------------------------------------------------------------
  # CRUD
  # ------------------------------------------------------------------

  def create(self, data: Mapping[str, Any]) -> int:
    if not data:
      raise ValidationError('Cannot create a record with an empty data mapping.')

    columns = list(data.keys())
    sql = 'INSERT INTO {} ({}) VALUES ({})'.format(
      quote_identifier(self._table),
      ', '.join(quote_identifier(column) for column in columns),
      ', '.join(f':{column}' for column in columns),
    )
    self._db.execute(sql, dict(data))
    return int(self._db.get_last_insert_id())

  def find(self, record_id: Any) -> Optional[Row]:
    sql = 'SELECT * FROM {} WHERE {} = :id LIMIT 1'.format(
      quote_identifier(self._table),
      quote_identifier(self._primary_key),
    )
    return self._db.fetch_one(sql, {'id': record_id})

  def find_or_fail(self, record_id: Any) -> Row:
    record = self.find(record_id)
    if record is None:
      raise NotFoundError(self._table, self._primary_key, record_id)
    return record

  def all(self) -> List[Row]:
    if self._state.is_empty():
      return self._db.fetch_all(f'SELECT * FROM {quote_identifier(self._table)}')
    return self.get()

  def update(self, record_id: Any, data: Mapping[str, Any]) -> int:
    """Update one row; a ``data`` key named ``id`` is overridden by ``record_id``."""
    if not data:
      raise ValidationError('Cannot update with an empty data mapping.')

    assignments = ', '.join(f'{quote_identifier(column)} = :{column}' for column in data)
    sql = 'UPDATE {} SET {} WHERE {} = :id'.format(
      quote_identifier(self._table),
      assignments,
      quote_identifier(self._primary_key),
    )
    params = dict(data)
    params['id'] = record_id
    return self._db.execute(sql, params)

  def delete(self, record_id: Any) -> int:
    sql = 'DELETE FROM {} WHERE {} = :id'.format(
      quote_identifier(self._table),
      quote_identifier(self._primary_key),
    )
    return self._db.execute(sql, {'id': record_id})

  # ------------------------------------------------------------------
  # Query execution
  # ------------------------------------------------------------------

  def count(self) -> int:
    compiled = self.to_sql('COUNT(*) AS total')
    row = self._db.fetch_one(compiled.sql, compiled.params)
    return int(row['total']) if row else 0

  def exists(self) -> bool:
    return self.count() > 0

  def get(self) -> List[Row]:
    compiled = self.to_sql()
    rows = self._db.fetch_all(compiled.sql, compiled.params)
    self.reset()
    return rows

  def to_sql(self, columns: str = '*') -> CompiledQuery:
    """Compile the current state without running or clearing it."""
    return self._compiler.compile(self._table, self._state, columns)

  def reset(self) -> 'TableRepository':
    self._state.reset()
    return self

  # ------------------------------------------------------------------
  # Builder
  # ------------------------------------------------------------------

  def where(self, column: str, operator: str, value: Any) -> 'TableRepository':
    self._state.conditions.append(QueryCondition(Conjunction.AND, column, operator, value))
    return self

  def or_where(self, column: str, operator: str, value: Any) -> 'TableRepository':
    self._state.conditions.append(QueryCondition(Conjunction.OR, column, operator, value))
    return self

  def order_by(self, column: str, direction: str = 'ASC') -> 'TableRepository':
    self._state.sort_orders.append(SortOrder(column, SortDirection.normalize(direction)))
    return self

  def limit(self, value: int) -> 'TableRepository':
    self._state.limit = _non_negative('limit', value)
    return self

  def offset(self, value: int) -> 'TableRepository':
    self._state.offset = _non_negative('offset', value)
    return self


def _non_negative(name: str, value: int) -> int:
  if isinstance(value, bool) or not isinstance(value, int):
    raise ValidationError(f'{name} must be an integer, got {value!r}')
  if value < 0:
    raise ValidationError(f'{name} must not be negative, got {value}')
  return value
