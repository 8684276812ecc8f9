"""
Server logging module.

This module handles server-side logging functionality.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Union

from common.constants import CHAT_LOG_FILE, LOG_DIR


class ServerLogger:
    """Server logging class."""

    def __init__(self, logs_dir: str = LOG_DIR, log_level: int = logging.INFO):
        self.logger = logging.getLogger('broadcast_chat_server')
        self.configure(logs_dir, log_level)

    def configure(self, logs_dir: str = LOG_DIR, log_level: Union[int, str] = logging.INFO):
        """(Re)initialise handlers and the chat history file location."""
        if isinstance(log_level, str):
            log_level = logging.getLevelName(log_level.upper())
            if not isinstance(log_level, int):
                log_level = logging.INFO

        self.logger.setLevel(log_level)

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)

        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        # Directory is created on first write
        self.logs_dir = Path(logs_dir)
        self.chat_log_path = self.logs_dir / CHAT_LOG_FILE

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def log_connection(self, addr, conn_id: int):
        """Log client connection."""
        self.info(f"New connection from {addr}, assigned id={conn_id}")

    def log_registration(self, username: str, conn_id: int):
        """Log first-time registration of a username."""
        self.info(f"New user registered: {username} (id={conn_id})")

    def log_login(self, username: str, conn_id: int):
        """Log user login."""
        self.info(f"User '{username}' authenticated on id={conn_id}")

    def log_wrong_password(self, username: str, conn_id: int):
        self.warning(f"Wrong password attempt for {username} (id={conn_id})")

    def log_rejected_duplicate(self, username: str, conn_id: int):
        self.warning(f"Rejected second session for {username} (id={conn_id})")

    def log_protocol_error(self, conn_id: int, notice: str):
        self.warning(f"Bad auth frame from id={conn_id}: {notice}")

    def log_disconnect(self, username: str, conn_id: int):
        """Log user disconnect."""
        self.info(f"User {username} (id={conn_id}) disconnected")

    def log_chat(self, username: str, conn_id: int, message: str):
        """Log chat message."""
        self.info(f"Chat from {username} (id={conn_id}): {message}")
        self._write_to_file(self.chat_log_path, f"{datetime.now().isoformat()} | {username} (id={conn_id}) | {message}")

    def log_send_failure(self, conn_id: int, error: Exception):
        self.warning(f"Failed to deliver to id={conn_id}: {error}")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")

    def _write_to_file(self, file_path: Path, content: str):
        """Write content to log file."""
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'a', encoding='utf-8') as f:
                f.write(content + '\n')
        except Exception as e:
            self.error(f"Failed to write to log file {file_path}: {e}")


# Global logger instance
logger = ServerLogger()
