"""
authgate - Authentication core for the dispatch platform API

Two independent ways to authenticate:
- self-issued: email/password signup and login issuing opaque session tokens
- external: ID tokens from the identity provider, checked on protected routes

Modules:
- auth: Password hashing, signup/login, ID token verification
- credentials: Per-identity credential storage
- session: Session token registry
- middleware: Request gate for protected routes
- storage: Redis connection for the redis backend
- api: REST API routers and models
"""

__version__ = "1.0.0"
