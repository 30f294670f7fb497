"""Dissipate — a small personal journal backend.

Users log in, then write, edit, delete and export short text messages.
Every protected request is authenticated with a stateless bearer token.
"""

__version__ = "0.1.0"
