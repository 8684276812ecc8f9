"""
Server package for the broadcast chat service.

This package contains all server-side functionality including:
- Connection authentication and session tracking
- Chat message and presence broadcasting
- Credential and message persistence
- Configuration and utilities
"""
