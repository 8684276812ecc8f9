"""
Chat module for server-side messaging functionality.

Handles:
- Session registry of authenticated connections
- Connection lifecycle and authentication
- Broadcast fan-out of chat lines and presence announcements
"""
