#!/usr/bin/env python3
"""
Broadcast Chat Server - Main Entry Point

Usage:
    python main_server.py

Optional arguments:
    --host HOST           Bind address (default: 0.0.0.0)
    --port PORT           Websocket port (default: 8080)
    --database PATH       SQLite database file (default: chat.db)
    --logs-dir DIR        Chat history log directory (default: logs)
    --log-level LEVEL     Console log level (default: INFO)
    --single-session      Reject concurrent logins for the same username

Settings can also come from the environment or a .env file
(PORT, CHAT_HOST, CHAT_DATABASE_PATH, ...); flags win.
"""

if __name__ == "__main__":
    from server.main_server import main

    main()
