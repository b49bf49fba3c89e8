"""
Shared module package.

Contains cross-cutting concerns used across bounded contexts:
- Error handling and mapping
- Security middleware, bearer token verification and rate limiting
- Logging configuration
"""
