# language.py
import json
import logging
from typing import get_args

from ..errors import ValidationError
from ..records import LanguageCode
from ..securestore import SecureStore

log = logging.getLogger(__name__)

STORAGE_KEY = "app_language"
DEFAULT_LANGUAGE = "dz"

class LanguageStore:
    """App-wide course language choice. Not scoped to a user."""

    def __init__(self, secure_store: SecureStore):
        self.secure_store = secure_store
        self.selected_language: str = DEFAULT_LANGUAGE
        self.has_chosen_language = False

    async def load(self) -> None:
        raw = await self.secure_store.get_item(STORAGE_KEY)
        if not raw:
            return
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            log.warning("ignoring corrupt language preference")
            return
        if not isinstance(data, dict):
            log.warning("ignoring corrupt language preference")
            return
        lang = data.get("selectedLanguage")
        self.selected_language = lang if lang in get_args(LanguageCode) else DEFAULT_LANGUAGE
        self.has_chosen_language = bool(data.get("hasChosenLanguage"))

    async def set_language(self, lang: str) -> None:
        if lang not in get_args(LanguageCode):
            raise ValidationError(f"Unsupported language: {lang}")
        self.selected_language = lang
        self.has_chosen_language = True
        await self.secure_store.set_item(
            STORAGE_KEY, json.dumps({"selectedLanguage": lang, "hasChosenLanguage": True}))

    async def reset_language_choice(self) -> None:
        self.has_chosen_language = False
        await self.secure_store.delete_item(STORAGE_KEY)
