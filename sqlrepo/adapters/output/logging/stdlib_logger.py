"""Logger port implementation backed by the standard ``logging`` module."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from sqlrepo.ports.output.logger import Logger


class StdlibLogger(Logger):
  """Forwards leveled calls to a :class:`logging.Logger`.

  The context mapping travels in ``extra['context']``; an ``exception``
  entry in it is attached as ``exc_info``.
  """

  def __init__(self, logger: logging.Logger) -> None:
    self._logger = logger

  def info(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
    self._log(logging.INFO, message, context)

  def debug(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
    self._log(logging.DEBUG, message, context)

  def error(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
    self._log(logging.ERROR, message, context)

  def _log(self, level: int, message: str, context: Optional[Mapping[str, Any]]) -> None:
    if not self._logger.isEnabledFor(level):
      return
    context = dict(context or {})
    exception = context.get('exception')
    exc_info = exception if isinstance(exception, BaseException) else None
    # The message may contain SQL with literal percent signs.
    self._logger.log(level, '%s', message, exc_info=exc_info, extra={'context': context})
