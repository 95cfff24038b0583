"""
Session Module - Black Box Interface

Purpose: Issue and resolve self-issued session tokens
Interface: issue(), resolve()
Hidden: Token generation, session storage

Replaceable with any session backend (in-memory, Redis, database).
"""

from .session import InMemorySessionRegistry, RedisSessionRegistry

__all__ = ["InMemorySessionRegistry", "RedisSessionRegistry"]
