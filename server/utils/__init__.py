"""
Utilities for the chat server: configuration and logging.
"""
