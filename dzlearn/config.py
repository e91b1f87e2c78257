# config.py
import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv
load_dotenv()

DEFAULT_DB_URL = "sqlite:///./dzlearn.db"
DEFAULT_KEYRING_SERVICE = "Dzardzongke"
DEFAULT_PBKDF2_ITERS = 120_000

def _int_env(name: str, default: int) -> int:
    try: return int(os.getenv(name, default))
    except ValueError: return default

@dataclass
class Config:
    db_url: str = DEFAULT_DB_URL
    keyring_service: str = DEFAULT_KEYRING_SERVICE
    pbkdf2_iters: int = DEFAULT_PBKDF2_ITERS
    secure_backend: str = "keyring"   # "keyring" or "memory"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        iters = _int_env("DZ_PBKDF2_ITERS", DEFAULT_PBKDF2_ITERS)
        return cls(
            db_url=os.getenv("DZ_DB_URL", DEFAULT_DB_URL),
            keyring_service=os.getenv("DZ_KEYRING_SERVICE", DEFAULT_KEYRING_SERVICE),
            pbkdf2_iters=iters if iters > 0 else DEFAULT_PBKDF2_ITERS,
            secure_backend=os.getenv("DZ_SECURE_BACKEND", "keyring").lower(),
            log_level=os.getenv("DZ_LOG_LEVEL", "INFO").upper(),
        )

def configure_logging(config: Config) -> None:
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("dzlearn").setLevel(getattr(logging, config.log_level, logging.INFO))
