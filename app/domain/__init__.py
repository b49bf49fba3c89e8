"""
Domain layer package.

Contains pure business logic: entities, domain services, typed errors
and port interfaces. No framework imports and no IO; storage and the
fallback cache are reached only through ports.
"""
