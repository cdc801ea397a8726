"""Domain service that turns builder state into a SELECT statement."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List

from sqlrepo.domain.entities.query_state import BuilderState

IDENTIFIER_QUOTE = '`'
LIMIT_PARAM = '__limit'
OFFSET_PARAM = '__offset'

_UNSAFE_PLACEHOLDER_CHARS = re.compile(r'[^a-zA-Z0-9_]')


def quote_identifier(identifier: str) -> str:
  """Wrap a table or column name in backticks, doubling any inside it."""
  escaped = identifier.replace(IDENTIFIER_QUOTE, IDENTIFIER_QUOTE * 2)
  return f'{IDENTIFIER_QUOTE}{escaped}{IDENTIFIER_QUOTE}'


def placeholder_base(column: str) -> str:
  return _UNSAFE_PLACEHOLDER_CHARS.sub('', column)


def condition_placeholder(column: str, index: int) -> str:
  """Bind name without the leading colon.

  ``index`` counts earlier conditions sharing the same stripped column name,
  so ``age > :age_0 AND age < :age_1`` never collide.
  """
  return f'{placeholder_base(column)}_{index}'


@dataclass(frozen=True)
class CompiledQuery:
  sql: str
  params: Dict[str, Any] = field(default_factory=dict)


class SelectCompiler:
  """Builds SQL text and its parameters from a :class:`BuilderState`.

  The operator of each condition is copied into the SQL verbatim; callers
  are trusted to pass operators such as ``=``, ``<>`` or ``LIKE``.
  """

  def compile(self, table: str, state: BuilderState, columns: str = '*') -> CompiledQuery:
    parts: List[str] = [f'SELECT {columns} FROM {quote_identifier(table)}']
    params: Dict[str, Any] = {}

    if state.conditions:
      clauses: List[str] = []
      occurrences: Dict[str, int] = {}
      for index, condition in enumerate(state.conditions):
        conjunction = 'WHERE' if index == 0 else condition.conjunction.value
        base = placeholder_base(condition.column)
        placeholder = condition_placeholder(condition.column, occurrences.get(base, 0))
        occurrences[base] = occurrences.get(base, 0) + 1
        clauses.append(
          f'{conjunction} {quote_identifier(condition.column)} {condition.operator} :{placeholder}'
        )
        params[placeholder] = condition.value
      parts.append(' '.join(clauses))

    if state.sort_orders:
      order_clauses = [
        f'{quote_identifier(order.column)} {order.direction.value}'
        for order in state.sort_orders
      ]
      parts.append('ORDER BY ' + ', '.join(order_clauses))

    if state.limit is not None:
      parts.append(f'LIMIT :{LIMIT_PARAM}')
      params[LIMIT_PARAM] = state.limit
      if state.offset is not None:
        parts.append(f'OFFSET :{OFFSET_PARAM}')
        params[OFFSET_PARAM] = state.offset

    return CompiledQuery(sql=' '.join(parts), params=params)
