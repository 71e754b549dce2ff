"""
Codecs used by the setup wizard engine.

Connection-string codecs are pure helpers; text codecs turn configuration
text into trees and back.
"""

from .connection import (
    PostgresFields,
    RedisFields,
    build_postgres_dsn,
    build_redis_url,
    build_sqlite_dsn,
    parse_postgres_dsn,
    parse_redis_url,
    parse_sqlite_path,
)
from .text import ConfigParseError, JsonCodec, TextCodec, YamlCodec, codec_for_path, get_codec

__all__ = [
    "PostgresFields",
    "RedisFields",
    "build_postgres_dsn",
    "build_redis_url",
    "build_sqlite_dsn",
    "parse_postgres_dsn",
    "parse_redis_url",
    "parse_sqlite_path",
    "ConfigParseError",
    "JsonCodec",
    "TextCodec",
    "YamlCodec",
    "codec_for_path",
    "get_codec",
]
