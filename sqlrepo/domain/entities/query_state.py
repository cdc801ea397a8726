"""Domain entities describing the accumulated state of a table query."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional


class Conjunction(str, Enum):
  AND = 'AND'
  OR = 'OR'


class SortDirection(str, Enum):
  ASC = 'ASC'
  DESC = 'DESC'

  @classmethod
  def normalize(cls, direction: str) -> 'SortDirection':
    """Anything other than a case-insensitive ``desc`` sorts ascending."""
    return cls.DESC if str(direction).upper() == cls.DESC.value else cls.ASC


@dataclass(frozen=True)
class QueryCondition:
  conjunction: Conjunction
  column: str
  operator: str
  value: Any


@dataclass(frozen=True)
class SortOrder:
  column: str
  direction: SortDirection = SortDirection.ASC


@dataclass
class BuilderState:
  """Conditions, ordering and paging collected by a repository."""

  conditions: List[QueryCondition] = field(default_factory=list)
  sort_orders: List[SortOrder] = field(default_factory=list)
  limit: Optional[int] = None
  offset: Optional[int] = None

  def is_empty(self) -> bool:
    return (
      not self.conditions
      and not self.sort_orders
      and self.limit is None
      and self.offset is None
    )

  def reset(self) -> None:
    self.conditions = []
    self.sort_orders = []
    self.limit = None
    self.offset = None
