from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from os import urandom
from dataclasses import dataclass
from string import hexdigits
from typing import Optional

PBKDF2_PARAMS = dict(iterations=120_000, key_len=32, salt_len=16)

@dataclass
class DerivedKey:
    key: bytes
    salt: bytes
    iterations: int

def make_salt(length: int = PBKDF2_PARAMS["salt_len"]) -> bytes:
    if length <= 0:
        raise ValueError("salt length must be positive")
    return urandom(length)

def derive_key(password: str, salt: bytes, iterations: int = PBKDF2_PARAMS["iterations"],
               key_len: int = PBKDF2_PARAMS["key_len"]) -> bytes:
    """PBKDF2 with HMAC-SHA256. Same (password, salt, iterations) always gives the same key."""
    if iterations <= 0:
        raise ValueError("iterations must be positive")
    if key_len <= 0:
        raise ValueError("key length must be positive")
    kdf = PBKDF2HMAC(algorithm=hashes.SHA256(), length=key_len, salt=salt, iterations=iterations)
    return kdf.derive(password.encode("utf-8"))

def derive_key_from_password(password: str, salt: Optional[bytes] = None,
                             iterations: int = PBKDF2_PARAMS["iterations"]) -> DerivedKey:
    if salt is None:
        salt = make_salt()
    key = derive_key(password, salt, iterations)
    return DerivedKey(key=key, salt=salt, iterations=iterations)

def to_hex(data: bytes) -> str: return bytes(data).hex()

def from_hex(text: str) -> bytes:
    # bytes.fromhex tolerates whitespace; stored values never contain any
    if len(text) % 2 or any(c not in hexdigits for c in text):
        raise ValueError("invalid hex string")
    return bytes.fromhex(text)
