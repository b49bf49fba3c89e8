"""
Shared error handling package.

Maps permission domain errors onto HTTP status codes and the
``{"error": ...}`` response body.
"""
