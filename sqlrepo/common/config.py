"""Application-level configuration utilities."""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from os import getenv
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

from sqlrepo.domain.value_objects.connection_config import (
  DEFAULT_DRIVER,
  DEFAULT_PORT,
  ConnectionConfig,
)

_TRUTHY = {'1', 'true', 'yes', 'on'}


@dataclass(frozen=True)
class Settings:
  """Immutable settings loaded from environment variables."""

  db_name: str
  db_host: str = '127.0.0.1'
  db_port: Optional[int] = DEFAULT_PORT
  db_user: str = 'root'
  db_password: str = ''
  db_driver: str = DEFAULT_DRIVER
  db_ssl: bool = False
  db_ssl_ca: Optional[str] = None
  db_ssl_cert: Optional[str] = None
  db_ssl_key: Optional[str] = None
  log_level: str = 'INFO'

  def connection_config(self) -> ConnectionConfig:
    ssl_options: Dict[str, str] = {}
    for key, value in (('ca', self.db_ssl_ca), ('cert', self.db_ssl_cert), ('key', self.db_ssl_key)):
      if value:
        ssl_options[key] = value

    return ConnectionConfig(
      host=self.db_host,
      database=self.db_name,
      user=self.db_user,
      password=self.db_password,
      port=self.db_port,
      use_ssl=self.db_ssl,
      ssl_options=ssl_options,
      driver=self.db_driver,
    )


def _parse_port(raw: Optional[str]) -> Optional[int]:
  if raw is None:
    return DEFAULT_PORT
  raw = raw.strip()
  if not raw:
    return None
  try:
    return int(raw)
  except ValueError as exc:
    raise ValueError(f'SQLREPO_DB_PORT must be an integer, got {raw!r}') from exc


def load_settings() -> Settings:
  """Build settings from the current environment without caching."""
  db_name = getenv('SQLREPO_DB_NAME')
  if not db_name:
    raise ValueError('SQLREPO_DB_NAME must be set in environment or .env file')

  return Settings(
    db_name=db_name,
    db_host=getenv('SQLREPO_DB_HOST', '127.0.0.1'),
    db_port=_parse_port(getenv('SQLREPO_DB_PORT')),
    db_user=getenv('SQLREPO_DB_USER', 'root'),
    db_password=getenv('SQLREPO_DB_PASSWORD', ''),
    db_driver=getenv('SQLREPO_DB_DRIVER', DEFAULT_DRIVER),
    db_ssl=getenv('SQLREPO_DB_SSL', '').strip().lower() in _TRUTHY,
    db_ssl_ca=getenv('SQLREPO_DB_SSL_CA') or None,
    db_ssl_cert=getenv('SQLREPO_DB_SSL_CERT') or None,
    db_ssl_key=getenv('SQLREPO_DB_SSL_KEY') or None,
    log_level=getenv('SQLREPO_LOG_LEVEL', 'INFO').upper(),
  )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Load settings from environment variables once per process."""
  env_path = Path(__file__).resolve().parents[2] / '.env'
  if env_path.exists():
    load_dotenv(env_path)
  else:
    load_dotenv()
  return load_settings()
