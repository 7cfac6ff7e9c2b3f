"""
Access-token secret generation and digesting.

A token value is ``num_bytes`` of ``secrets.token_bytes`` rendered as URL-safe
base64 without padding. The stored digest is ``hashlib.new(algorithm)`` over
the UTF-8 value, rendered the same way. Only the digest ever reaches a
datastore.
"""

from __future__ import annotations

import base64
import hashlib
import secrets

from pipeline_models.config import TokenConfig
from pipeline_models.errors import ConfigurationError

MIN_TOKEN_BYTES = 16


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


class TokenGenerator:
    """Produces cleartext token values and their one-way digests."""

    def __init__(self, num_bytes: int = 32, hash_algorithm: str = "sha256") -> None:
        if num_bytes < MIN_TOKEN_BYTES:
            raise ConfigurationError(f"Token length must be at least {MIN_TOKEN_BYTES} bytes, got {num_bytes}")
        if hash_algorithm not in hashlib.algorithms_available:
            raise ConfigurationError(f"Unknown hash algorithm: {hash_algorithm}")
        # Variable-length digests (shake_*) need a length argument; not supported here
        if hashlib.new(hash_algorithm).digest_size == 0:
            raise ConfigurationError(f"Hash algorithm {hash_algorithm} has no fixed digest size")
        self.num_bytes = num_bytes
        self.hash_algorithm = hash_algorithm

    @classmethod
    def from_config(cls, cfg: TokenConfig) -> TokenGenerator:
        return cls(num_bytes=cfg.num_bytes, hash_algorithm=cfg.hash_algorithm)

    def generate_value(self) -> str:
        """Return a fresh cleartext token value."""
        return _b64url(secrets.token_bytes(self.num_bytes))

    def hash_value(self, value: str) -> str:
        """Return the digest stored in place of ``value``."""
        h = hashlib.new(self.hash_algorithm)
        h.update(value.encode("utf-8"))
        return _b64url(h.digest())
