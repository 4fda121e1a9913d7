"""
Key sources for resolving ID token signing certificates.

This package contains the client for Google's public certificate endpoint,
which serves the keys Firebase ID tokens are signed with.
"""

from .google import GOOGLE_PUBLIC_KEYS_URL, PublicKeySet, fetch_public_keys, parse_max_age

__all__ = ["GOOGLE_PUBLIC_KEYS_URL", "PublicKeySet", "fetch_public_keys", "parse_max_age"]
