import hmac
import time

from ..records import UserRecord
from .keys import PBKDF2_PARAMS, derive_key, derive_key_from_password, from_hex, to_hex

def make_login_record(username: str, password: str,
                      iterations: int = PBKDF2_PARAMS["iterations"]) -> UserRecord:
    dk = derive_key_from_password(password, iterations=iterations)
    return UserRecord(username=username, password_hash=to_hex(dk.key), salt=to_hex(dk.salt),
                      iters=dk.iterations, created_at=int(time.time() * 1000))

def verify_login_hash(password: str, record: UserRecord) -> bool:
    # stored salt and stored iteration count, never the current defaults
    key = derive_key(password, from_hex(record.salt), record.iters,
                     key_len=len(record.password_hash) // 2)
    return hmac.compare_digest(to_hex(key), record.password_hash)
