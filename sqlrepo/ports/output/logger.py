"""Output port for the optional leveled logger."""
from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol


class Logger(Protocol):
  def info(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
    ...

  def debug(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
    ...

  def error(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
    ...
