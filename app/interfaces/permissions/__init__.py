"""
Interfaces for the permissions bounded context.

User-facing permission read and admin permission management routes.
"""
