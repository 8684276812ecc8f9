"""
Client package for the broadcast chat service.

This package contains a terminal client that authenticates against the
server, sends chat lines and prints broadcasts.
"""
