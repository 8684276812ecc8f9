"""
Auth module for server-side credential checks.

Handles:
- Password digest computation
- Password verification against stored digests
"""
