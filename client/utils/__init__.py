"""
Utilities for the chat client: configuration.
"""
