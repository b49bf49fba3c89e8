"""
Infrastructure adapters for the permissions bounded context.

Each adapter implements a domain port (ABC) and connects
to external systems: PostgreSQL tables and process memory.
"""
