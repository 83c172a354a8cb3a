"""Hashing utilities.

Partitioning must agree across processes and machines, so it cannot use the
builtin hash() (randomized per interpreter for str). SHA-256 is stable.
"""

import hashlib

def sha256_bytes(text: str) -> bytes:
    return hashlib.sha256(text.encode("utf-8", errors="surrogatepass")).digest()
