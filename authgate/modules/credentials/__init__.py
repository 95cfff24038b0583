"""
Credential Module - Black Box Interface

Purpose: Hold one salted password hash per identity
Interface: create(), get(), normalize_email()
Hidden: Storage layout, atomic insert mechanics

Replaceable with any backend offering an atomic insert-if-absent.
"""

from .store import Credential, InMemoryCredentialStore, RedisCredentialStore, normalize_email

__all__ = ["Credential", "InMemoryCredentialStore", "RedisCredentialStore", "normalize_email"]
