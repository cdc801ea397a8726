"""Logging configuration shared by the command-line entrypoint."""
from __future__ import annotations

import logging
import sys
from typing import Union

_LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'
_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
_setup_done = False


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
  """Attach one console handler to the root logger.

  Safe to call multiple times; later calls only adjust the level.
  """
  global _setup_done
  root = logging.getLogger()
  root.setLevel(level)
  if _setup_done:
    return

  handler = logging.StreamHandler(sys.stderr)
  handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
  root.addHandler(handler)
  _setup_done = True


def get_logger(name: str) -> logging.Logger:
  """Return a named logger; the library itself never configures handlers."""
  return logging.getLogger(name)
