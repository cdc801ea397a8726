"""CLI adapter for inspecting a database through the repository layer."""
from __future__ import annotations

import json
from typing import Any, Callable, Optional, Tuple

import click

from sqlrepo.application.services.table_repository import TableRepository
from sqlrepo.domain.exceptions import SqlRepoError
from sqlrepo.ports.output.database import Database

Condition = Tuple[str, str, str]


class CLIAdapter:
  def __init__(self, database_factory: Callable[[], Database]):
    self._database_factory = database_factory

  def run(self) -> None:
    self.build()()

  def build(self) -> click.Group:
    cli = click.Group(help='Inspect a relational database through sqlrepo.')

    @cli.command('ping')
    def ping() -> None:
      """Open a connection and run a trivial query."""
      value = self._call(lambda db: db.fetch_column('SELECT 1'))
      _echo({'status': 'ok', 'result': value})

    @cli.command('table-exists')
    @click.argument('table')
    def table_exists(table: str) -> None:
      """Report whether TABLE exists in the configured database."""
      exists = self._call(lambda db: db.table_exists(table))
      _echo({'table': table, 'exists': exists})
      if not exists:
        raise click.exceptions.Exit(1)

    @cli.command('find')
    @click.argument('table')
    @click.argument('record_id')
    @click.option('--primary-key', default='id', show_default=True, help='Primary-key column')
    def find(table: str, record_id: str, primary_key: str) -> None:
      """Print the row of TABLE whose primary key equals RECORD_ID."""
      row = self._call(
        lambda db: TableRepository(db, table, primary_key).find_or_fail(_coerce(record_id))
      )
      _echo(row)

    @cli.command('count')
    @click.argument('table')
    @click.option('--where', 'conditions', multiple=True, type=(str, str, str),
                  metavar='COLUMN OPERATOR VALUE', help='AND condition (repeatable)')
    @click.option('--or-where', 'or_conditions', multiple=True, type=(str, str, str),
                  metavar='COLUMN OPERATOR VALUE', help='OR condition (repeatable)')
    def count(table: str, conditions: Tuple[Condition, ...], or_conditions: Tuple[Condition, ...]) -> None:
      """Count rows of TABLE matching the given conditions."""
      def work(db: Database) -> int:
        repository = _apply_conditions(TableRepository(db, table), conditions, or_conditions)
        return repository.count()

      _echo({'table': table, 'count': self._call(work)})

    @cli.command('list')
    @click.argument('table')
    @click.option('--where', 'conditions', multiple=True, type=(str, str, str),
                  metavar='COLUMN OPERATOR VALUE', help='AND condition (repeatable)')
    @click.option('--or-where', 'or_conditions', multiple=True, type=(str, str, str),
                  metavar='COLUMN OPERATOR VALUE', help='OR condition (repeatable)')
    @click.option('--order-by', 'orders', multiple=True, metavar='COLUMN[:DIR]',
                  help='Sort column, optionally suffixed with :asc or :desc (repeatable)')
    @click.option('--limit', type=click.IntRange(min=0), default=None, help='Maximum rows')
    @click.option('--offset', type=click.IntRange(min=0), default=None, help='Rows to skip (needs --limit)')
    def list_rows(
      table: str,
      conditions: Tuple[Condition, ...],
      or_conditions: Tuple[Condition, ...],
      orders: Tuple[str, ...],
      limit: Optional[int],
      offset: Optional[int],
    ) -> None:
      """Print rows of TABLE as a JSON array."""
      def work(db: Database) -> list:
        repository = _apply_conditions(TableRepository(db, table), conditions, or_conditions)
        for order in orders:
          column, _, direction = order.partition(':')
          repository.order_by(column, direction or 'ASC')
        if limit is not None:
          repository.limit(limit)
        if offset is not None:
          repository.offset(offset)
        return repository.all()

      _echo(self._call(work))

    return cli

  def _call(self, work: Callable[[Database], Any]) -> Any:
    db = self._database_factory()
    try:
      return work(db)
    except SqlRepoError as exc:
      raise click.ClickException(exc.message) from exc
    finally:
      db.close()


def _apply_conditions(
  repository: TableRepository,
  conditions: Tuple[Condition, ...],
  or_conditions: Tuple[Condition, ...],
) -> TableRepository:
  for column, operator, value in conditions:
    repository.where(column, operator, _coerce(value))
  for column, operator, value in or_conditions:
    repository.or_where(column, operator, _coerce(value))
  return repository


def _coerce(value: str) -> Any:
  """Command-line values that look like integers are bound as integers."""
  try:
    return int(value)
  except ValueError:
    return value


def _echo(payload: Any) -> None:
  click.echo(json.dumps(payload, ensure_ascii=False, indent=2, default=str))
