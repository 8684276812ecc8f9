"""
Shared definitions for the broadcast chat service.

Contains the constants and protocol helpers used by both the server and
the terminal client.
"""
