"""Auth package: handles password hashing and key derivation (PBKDF2-HMAC-SHA256)."""
from .keys import (derive_key, derive_key_from_password, from_hex, make_salt,
                   to_hex, PBKDF2_PARAMS)
from .login import make_login_record, verify_login_hash
