# saved.py
import logging
import secrets
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError
from ..records import SavedItem, now_iso
from .base import ScopedBlobStore

log = logging.getLogger(__name__)

class SavedStore(ScopedBlobStore):
    base_key = "saved_items"

    def __init__(self, secure_store, context):
        super().__init__(secure_store, context)
        self.items: List[SavedItem] = []

    async def load(self) -> None:
        data = await self._read_json()
        if data is None:
            return
        try:
            self.items = [SavedItem.model_validate(d) for d in data]
        except (PydanticValidationError, TypeError):
            log.warning("ignoring malformed saved items at %s", self.storage_key)

    async def _persist(self) -> None:
        await self._write_json([i.to_json_dict() for i in self.items])

    async def save_item(self, prompt: str, answer: str, language: str, explanation: str,
                        source: str, notes: Optional[str] = None,
                        deck_id: Optional[str] = None, card_id: Optional[str] = None) -> SavedItem:
        try:
            item = SavedItem(id=secrets.token_hex(6), prompt=prompt, answer=answer,
                             language=language, explanation=explanation, notes=notes,
                             source=source, deck_id=deck_id, card_id=card_id,
                             created_at=now_iso())
        except PydanticValidationError as e:
            raise ValidationError("Invalid saved item") from e
        self.items = [*self.items, item]
        await self._persist()
        return item

    async def remove_item(self, item_id: str) -> None:
        self.items = [i for i in self.items if i.id != item_id]
        await self._persist()

    async def clear_all(self) -> None:
        self.items = []
        await self._delete()

    def reset_memory_only(self) -> None:
        self.items = []
