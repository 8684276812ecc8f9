"""
Storage module for server-side persistence.

Handles:
- SQLite schema management
- User credential and presence records
- Append-only chat message log
"""
