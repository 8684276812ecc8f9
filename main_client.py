#!/usr/bin/env python3
"""
Broadcast Chat Client - Main Entry Point

Usage:
    python main_client.py --username alice

Optional arguments:
    --host HOST           Server address (default: localhost)
    --port PORT           Server port (default: 8080)
    --password PASSWORD   Password (prompted when omitted)
"""

if __name__ == "__main__":
    from client.main_client import main

    main()
