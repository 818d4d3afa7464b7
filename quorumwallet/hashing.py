"""
QuorumWallet Hashing

All hashes use SHA-256 with lowercase hexadecimal output.

The notification log is a hash chain:

    payload_hash = SHA-256(CJE(notification_body))
    entry_hash   = SHA-256(prev_entry_hash || payload_hash)

with an empty prev_entry_hash for the first entry.
"""

import hashlib
from typing import Any, Optional, Union

from .canonicalization import canonicalize


def sha256_hex(data: Union[bytes, str]) -> str:
    if isinstance(data, str):
        data = data.encode('utf-8')
    return hashlib.sha256(data).hexdigest().lower()


def payload_hash(body: Any) -> str:
    """SHA-256 of the canonical JSON encoding of a notification body."""
    return sha256_hex(canonicalize(body))


def chain_entry_hash(prev_entry_hash: Optional[str], payload_digest: str) -> str:
    data = (prev_entry_hash or "").encode('utf-8') + payload_digest.encode('utf-8')
    return sha256_hex(data)


def transaction_hash(destination: Any, value: int, payload: bytes) -> str:
    """Content hash of a proposed action, useful for out-of-band review."""
    return sha256_hex(canonicalize({
        "destination": destination,
        "value": value,
        "payload": payload,
    }))
