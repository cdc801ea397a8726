"""CLI entrypoint for sqlrepo."""
from __future__ import annotations

import sys
from pathlib import Path

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlrepo.adapters.input.cli.cli_adapter import CLIAdapter
from sqlrepo.common.config import get_settings
from sqlrepo.common.container import create_database
from sqlrepo.common.logging import setup_logging


def main() -> None:
  settings = get_settings()
  setup_logging(settings.log_level)
  CLIAdapter(lambda: create_database(settings)).run()


if __name__ == '__main__':
  main()
