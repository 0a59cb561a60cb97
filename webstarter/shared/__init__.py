"""
Shared module package.

Contains cross-cutting concerns used by every route group:
- Middleware chain, panic recovery and bad-status resolution
- Engine error handlers and default resolvers
- Basic auth and body size limit
- Logging configuration
"""
