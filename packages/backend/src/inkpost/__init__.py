"""Inkpost — blog publishing backend.

Users sign up, log in, and manage their posts through a single GraphQL
endpoint. A small REST surface handles image upload and health checks.
"""

__version__ = "0.1.0"
