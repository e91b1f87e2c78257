import json
import logging
from typing import Any, Optional

from ..securestore import SecureStore
from ..session import SessionContext

log = logging.getLogger(__name__)

class ScopedBlobStore:
    """One JSON document per user, keyed ``{base_key}:user:{username}``."""

    base_key: str = ""

    def __init__(self, secure_store: SecureStore, context: SessionContext):
        self.secure_store = secure_store
        self.context = context

    @property
    def storage_key(self) -> str:
        return self.context.scoped_key(self.base_key)

    async def _read_json(self) -> Optional[Any]:
        key = self.storage_key
        raw = await self.secure_store.get_item(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            log.warning("ignoring corrupt document at %s", key)
            return None

    async def _write_json(self, data: Any) -> None:
        key = self.storage_key
        await self.secure_store.set_item(key, json.dumps(data))
        log.debug("wrote %s", key)

    async def _delete(self) -> None:
        await self.secure_store.delete_item(self.storage_key)
