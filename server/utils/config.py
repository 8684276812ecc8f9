"""
Server configuration module.

This module handles server-side configuration settings. Values come from the
constructor, or from the environment (and a ``.env`` file) via ``from_env``.
"""

import os
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from common.constants import (
    DEFAULT_SERVER_HOST, DEFAULT_PORT, DEFAULT_DATABASE_PATH, DEFAULT_BCRYPT_ROUNDS,
    LOG_DIR, EnvVars
)

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off'}


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


class ServerConfig:
    """Server configuration class."""

    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT,
                 database_path: str = DEFAULT_DATABASE_PATH, logs_dir: str = LOG_DIR,
                 log_level: str = 'INFO', bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS,
                 allow_duplicate_sessions: bool = True):
        self.host = host
        self.port = port

        # Persistence
        self.database_path = database_path

        # Logging configuration
        self.logs_dir = logs_dir
        self.log_level = log_level

        # Auth settings
        self.bcrypt_rounds = bcrypt_rounds
        self.allow_duplicate_sessions = allow_duplicate_sessions

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, dotenv_path: Optional[str] = None) -> 'ServerConfig':
        """
        Build a config from environment variables.

        When ``environ`` is omitted, a ``.env`` file is loaded first and
        ``os.environ`` is read. Unset variables keep their defaults.
        """
        if environ is None:
            load_dotenv(dotenv_path or find_dotenv(usecwd=True))
            environ = os.environ

        config = cls()
        if EnvVars.HOST in environ:
            config.host = environ[EnvVars.HOST]
        if EnvVars.PORT in environ:
            config.port = _parse_int(EnvVars.PORT, environ[EnvVars.PORT])
        if EnvVars.DATABASE_PATH in environ:
            config.database_path = environ[EnvVars.DATABASE_PATH]
        if EnvVars.LOG_DIR in environ:
            config.logs_dir = environ[EnvVars.LOG_DIR]
        if EnvVars.LOG_LEVEL in environ:
            config.log_level = environ[EnvVars.LOG_LEVEL].upper()
        if EnvVars.BCRYPT_ROUNDS in environ:
            config.bcrypt_rounds = _parse_int(EnvVars.BCRYPT_ROUNDS, environ[EnvVars.BCRYPT_ROUNDS])
        if EnvVars.ALLOW_DUPLICATE_SESSIONS in environ:
            config.allow_duplicate_sessions = _parse_bool(
                EnvVars.ALLOW_DUPLICATE_SESSIONS, environ[EnvVars.ALLOW_DUPLICATE_SESSIONS]
            )
        return config

    def get_connection_info(self):
        """Get connection information."""
        return {
            'host': self.host,
            'port': self.port
        }

    def get_log_settings(self):
        """Get logging settings."""
        return {
            'logs_dir': self.logs_dir,
            'log_level': self.log_level
        }
