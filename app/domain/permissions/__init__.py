"""
Permissions bounded context — domain layer.

This module contains all domain logic for trade permissions:
- Permission modes and their buy/sell flag mapping
- Row normalization across current and legacy table shapes
- Tiered resolution (current schema, legacy schema, process memory)
"""
