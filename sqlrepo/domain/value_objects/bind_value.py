"""Bind-type classification for statement parameters."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.sql.sqltypes import NullType
from sqlalchemy.types import TypeEngine


class BindType(str, Enum):
  INTEGER = 'integer'
  BOOLEAN = 'boolean'
  NULL = 'null'
  TEXT = 'text'

  def sql_type(self) -> TypeEngine:
    if self is BindType.INTEGER:
      return Integer()
    if self is BindType.BOOLEAN:
      return Boolean()
    if self is BindType.NULL:
      return NullType()
    return String()


def classify(value: Any) -> BindType:
  # bool is a subclass of int, so it has to be checked first.
  if isinstance(value, bool):
    return BindType.BOOLEAN
  if isinstance(value, int):
    return BindType.INTEGER
  if value is None:
    return BindType.NULL
  return BindType.TEXT


@dataclass(frozen=True)
class BindValue:
  """A parameter value paired with the type it is bound as."""

  name: str
  value: Any
  bind_type: BindType

  @staticmethod
  def of(name: str, value: Any) -> 'BindValue':
    return BindValue(name=name, value=value, bind_type=classify(value))
