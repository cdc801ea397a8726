"""Output port for parameterized database access."""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, TypeVar

T = TypeVar('T')

Params = Mapping[Any, Any]


class Database(Protocol):
  """Defines how repositories talk to a relational database."""

  def execute(self, query: str, params: Optional[Params] = None) -> int:
    """Run a statement that returns no rows and return the affected row count."""
    ...

  def fetch_one(self, query: str, params: Optional[Params] = None) -> Optional[Dict[str, Any]]:
    ...

  def fetch_all(self, query: str, params: Optional[Params] = None) -> List[Dict[str, Any]]:
    ...

  def fetch_column(
    self,
    query: str,
    params: Optional[Params] = None,
    column_index: int = 0,
  ) -> Any:
    ...

  def begin_transaction(self) -> bool:
    ...

  def commit(self) -> bool:
    ...

  def roll_back(self) -> bool:
    ...

  def transaction(self, callback: Callable[['Database'], T]) -> T:
    ...

  def table_exists(self, table_name: str) -> bool:
    ...

  def get_last_insert_id(self) -> str:
    ...

  def close(self) -> None:
    ...
