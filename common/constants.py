"""
Shared constants for the broadcast chat service.

This module contains all constants used across client and server components.
"""

# Network Configuration
DEFAULT_HOST = 'localhost'
DEFAULT_SERVER_HOST = '0.0.0.0'
DEFAULT_PORT = 8080

# Storage
DEFAULT_DATABASE_PATH = 'chat.db'
DEFAULT_HISTORY_LIMIT = 50

# Password hashing (bcrypt cost factor)
DEFAULT_BCRYPT_ROUNDS = 10

# Logging
LOG_DIR = 'logs'
CHAT_LOG_FILE = 'chat_history.log'

# Timestamp formats
DISPLAY_TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'

# Environment variables read by ServerConfig.from_env()
class EnvVars:
    PORT = 'PORT'
    HOST = 'CHAT_HOST'
    DATABASE_PATH = 'CHAT_DATABASE_PATH'
    LOG_DIR = 'CHAT_LOG_DIR'
    LOG_LEVEL = 'CHAT_LOG_LEVEL'
    BCRYPT_ROUNDS = 'CHAT_BCRYPT_ROUNDS'
    ALLOW_DUPLICATE_SESSIONS = 'CHAT_ALLOW_DUPLICATE_SESSIONS'


# Server to Client notices
class Notices:
    INVALID_AUTH_FORMAT = 'ERROR: Invalid auth format'
    CREDENTIALS_REQUIRED = 'ERROR: Username and password required'
    WRONG_PASSWORD = 'ERROR: Wrong password'
    AUTH_FAILED = 'ERROR: Authentication failed'
    ALREADY_CONNECTED = 'ERROR: User already connected'
    AUTH_SUCCESS = 'AUTH_SUCCESS'

    ERROR_PREFIX = 'ERROR:'
