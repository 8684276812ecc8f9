"""
Chat module for client-side messaging functionality.

Handles:
- Authentication handshake
- Sending chat lines
- Printing server broadcasts
"""
