"""
Connection-string codecs for the relational database, the embedded database
and the cache service.

Every parser is total: malformed input falls back to the documented default
for each field that cannot be read, never to an exception.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import quote, unquote


DEFAULT_DB_HOST = "localhost"
DEFAULT_DB_PORT = "5432"
DEFAULT_DB_USER = "postgres"
DEFAULT_DB_PASS = "admin888"
DEFAULT_DB_NAME = "fileuni"

DEFAULT_SQLITE_PATH = "./fileuni.db"
SQLITE_SCHEME_PREFIX = "sqlite://"
SQLITE_SHORT_PREFIX = "sqlite:"

DEFAULT_CACHE_HOST = "127.0.0.1"
DEFAULT_CACHE_PORT = "6379"
DEFAULT_CACHE_USER = ""
DEFAULT_CACHE_PASS = "admin888"
REDIS_SCHEME = "redis"
REDIS_TLS_SCHEME = "rediss"

_POSTGRES_DSN_RE = re.compile(
    r"^postgres(?:ql)?://"
    r"(?:(?P<auth>[^/?#]*)@)?"
    r"(?P<host>[^:/?#]*)"
    r"(?::(?P<port>[^/?#]*))?"
    r"(?:/(?P<name>[^?#]*))?"
    r"(?:[?#].*)?$",
    re.IGNORECASE | re.DOTALL,
)

_REDIS_URL_RE = re.compile(
    r"^(?P<scheme>rediss?)://"
    r"(?:(?P<auth>[^/?#]*)@)?"
    r"(?P<host>[^:/?#]*)"
    r"(?::(?P<port>[^/?#]*))?",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class PostgresFields:
    """Composite fields of a relational database DSN."""

    host: str = DEFAULT_DB_HOST
    port: str = DEFAULT_DB_PORT
    user: str = DEFAULT_DB_USER
    password: str = DEFAULT_DB_PASS
    name: str = DEFAULT_DB_NAME


@dataclass(frozen=True)
class RedisFields:
    """Composite fields of a cache service URL."""

    host: str = DEFAULT_CACHE_HOST
    port: str = DEFAULT_CACHE_PORT
    user: str = DEFAULT_CACHE_USER
    password: str = DEFAULT_CACHE_PASS
    use_tls: bool = False


def _port_or_default(value: str | None, fallback: str) -> str:
    text = (value or "").strip()
    return text if text.isdigit() else fallback


def _non_empty(value: str | None, fallback: str) -> str:
    text = (value or "").strip()
    return text or fallback


def _split_auth(auth: str | None) -> tuple[str, str]:
    if auth is None:
        return "", ""
    user, _, password = auth.partition(":")
    return unquote(user), unquote(password)


def _auth_segment(user: str, password: str) -> str:
    if not user and not password:
        return ""
    return f"{quote(user, safe='')}:{quote(password, safe='')}@"


def parse_postgres_dsn(dsn: str) -> PostgresFields:
    """
    Parse ``postgres://[user[:pass]@]host[:port][/name]`` into composite fields.

    Credentials and the database name are percent-decoded. A query string or
    fragment is ignored. Host, port and name each fall back to their default
    on their own; credentials are read as written, so a DSN without a
    ``user:pass@`` segment has empty credentials.
    """
    match = _POSTGRES_DSN_RE.match((dsn or "").strip())
    if not match:
        return PostgresFields()
    user, password = _split_auth(match.group("auth"))
    return PostgresFields(
        host=match.group("host") or DEFAULT_DB_HOST,
        port=_port_or_default(match.group("port"), DEFAULT_DB_PORT),
        user=user,
        password=password,
        name=unquote(match.group("name") or "") or DEFAULT_DB_NAME,
    )


def build_postgres_dsn(fields: PostgresFields) -> str:
    """
    Build a relational DSN from composite fields.

    The ``user:pass@`` segment is omitted when both credentials are empty.
    """
    host = _non_empty(fields.host, DEFAULT_DB_HOST)
    port = _port_or_default(fields.port, DEFAULT_DB_PORT)
    name = _non_empty(fields.name, DEFAULT_DB_NAME)
    auth = _auth_segment(fields.user or "", fields.password or "")
    return f"postgres://{auth}{host}:{port}/{quote(name, safe='')}"


def parse_sqlite_path(dsn: str) -> str:
    """Strip the embedded-database scheme from a DSN, defaulting the path."""
    text = (dsn or "").strip()
    if text.startswith(SQLITE_SCHEME_PREFIX):
        return text[len(SQLITE_SCHEME_PREFIX):] or DEFAULT_SQLITE_PATH
    if text.startswith(SQLITE_SHORT_PREFIX):
        return text[len(SQLITE_SHORT_PREFIX):] or DEFAULT_SQLITE_PATH
    return DEFAULT_SQLITE_PATH


def build_sqlite_dsn(path: str) -> str:
    """Prepend the embedded-database scheme; an empty path uses the default."""
    return f"{SQLITE_SCHEME_PREFIX}{_non_empty(path, DEFAULT_SQLITE_PATH)}"


def parse_redis_url(url: str) -> RedisFields:
    """
    Parse ``redis[s]://[user[:pass]@]host[:port]`` into composite fields.

    The ``rediss`` scheme selects TLS. Missing credentials stay empty.
    """
    match = _REDIS_URL_RE.match((url or "").strip())
    if not match:
        return RedisFields()
    user, password = _split_auth(match.group("auth"))
    return RedisFields(
        host=match.group("host") or DEFAULT_CACHE_HOST,
        port=_port_or_default(match.group("port"), DEFAULT_CACHE_PORT),
        user=user,
        password=password,
        use_tls=match.group("scheme").lower() == REDIS_TLS_SCHEME,
    )


def build_redis_url(fields: RedisFields) -> str:
    """Build a cache URL; the scheme variant follows ``use_tls``."""
    scheme = REDIS_TLS_SCHEME if fields.use_tls else REDIS_SCHEME
    host = _non_empty(fields.host, DEFAULT_CACHE_HOST)
    port = _port_or_default(fields.port, DEFAULT_CACHE_PORT)
    auth = _auth_segment(fields.user or "", fields.password or "")
    return f"{scheme}://{auth}{host}:{port}"
