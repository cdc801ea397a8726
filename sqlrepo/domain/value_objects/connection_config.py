"""Value object for database connection settings."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.engine import URL

DEFAULT_PORT = 3306
DEFAULT_DRIVER = 'mysql+pymysql'
DEFAULT_CHARSET = 'utf8mb4'
SSL_OPTION_KEYS = ('ca', 'cert', 'key')


@dataclass(frozen=True)
class ConnectionConfig:
  """Immutable description of how to reach one database."""

  host: str
  database: str
  user: str
  password: str
  port: Optional[int] = DEFAULT_PORT
  use_ssl: bool = False
  ssl_options: Mapping[str, str] = field(default_factory=dict)
  driver: str = DEFAULT_DRIVER
  charset: str = DEFAULT_CHARSET

  def __post_init__(self) -> None:
    if not self.driver:
      raise ValueError('driver is required')
    if not self.database and self.backend != 'sqlite':
      raise ValueError('database is required')
    object.__setattr__(self, 'ssl_options', MappingProxyType(dict(self.ssl_options)))

  @property
  def backend(self) -> str:
    """Dialect name without the DBAPI suffix, e.g. ``mysql``."""
    return self.driver.split('+', 1)[0]

  @property
  def is_mysql(self) -> bool:
    return self.backend in ('mysql', 'mariadb')

  def to_url(self) -> URL:
    if self.backend == 'sqlite':
      return URL.create(self.driver, database=self.database or None)

    query: Dict[str, str] = {}
    if self.is_mysql and self.charset:
      query['charset'] = self.charset

    return URL.create(
      self.driver,
      username=self.user or None,
      password=self.password or None,
      host=self.host or None,
      port=self.port,
      database=self.database,
      query=query,
    )

  def connect_args(self) -> Dict[str, Any]:
    """Driver keyword arguments, currently only TLS material."""
    if not self.use_ssl:
      return {}

    ssl = {
      key: self.ssl_options[key]
      for key in SSL_OPTION_KEYS
      if self.ssl_options.get(key)
    }
    return {'ssl': ssl} if ssl else {}

  def describe(self) -> str:
    """Credential-free label used in log messages."""
    return f'{self.database} at {self.host}' if self.host else str(self.database)
