# progress.py
import logging
import uuid
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..records import CardProgress, ProgressStatus, StudySession, now_iso, parse_iso
from .base import ScopedBlobStore

log = logging.getLogger(__name__)

LEGACY_DECK_PREFIX = "dz:"

DeckProgress = Dict[str, CardProgress]  # card id -> progress


def _migrate_legacy(progress: dict) -> dict:
    # early builds stored bare deck ids; everything now lives under a language prefix
    if not progress or any(":" in deck_id for deck_id in progress):
        return progress
    log.debug("migrating %d legacy deck ids to %s*", len(progress), LEGACY_DECK_PREFIX)
    return {f"{LEGACY_DECK_PREFIX}{deck_id}": cards for deck_id, cards in progress.items()}


class ProgressStore(ScopedBlobStore):
    """Card status per deck plus the study-session history for the current user."""

    base_key = "flashcard_progress"

    def __init__(self, secure_store, context):
        super().__init__(secure_store, context)
        self.progress: Dict[str, DeckProgress] = {}
        self.sessions: List[StudySession] = []
        self.current_session: Optional[StudySession] = None

    async def load(self) -> None:
        data = await self._read_json()
        if not isinstance(data, dict):
            return
        try:
            progress = {
                deck_id: {card_id: CardProgress.model_validate(p) for card_id, p in cards.items()}
                for deck_id, cards in _migrate_legacy(data.get("progress") or {}).items()
            }
            sessions = [StudySession.model_validate(s) for s in data.get("sessions") or []]
        except (PydanticValidationError, AttributeError, TypeError):
            log.warning("ignoring malformed progress at %s", self.storage_key)
            return
        self.progress, self.sessions = progress, sessions
        log.debug("loaded %d decks, %d sessions from %s",
                  len(progress), len(sessions), self.storage_key)

    async def _persist(self) -> None:
        await self._write_json({
            "progress": {
                deck_id: {card_id: p.to_json_dict() for card_id, p in cards.items()}
                for deck_id, cards in self.progress.items()
            },
            "sessions": [s.to_json_dict() for s in self.sessions],
        })

    async def _set_card(self, deck_id: str, card_id: str, card: CardProgress) -> None:
        deck = dict(self.progress.get(deck_id, {}))
        deck[card_id] = card
        self.progress = {**self.progress, deck_id: deck}
        await self._persist()

    async def set_mastered(self, deck_id: str, card_id: str, mastered: bool) -> None:
        now = now_iso()
        card = CardProgress(status="mastered" if mastered else "new",
                            last_correct=now if mastered else None, last_attempt=now)
        await self._set_card(deck_id, card_id, card)

    async def set_learning(self, deck_id: str, card_id: str, learning: bool) -> None:
        card = CardProgress(status="learning" if learning else "new", last_attempt=now_iso())
        await self._set_card(deck_id, card_id, card)

    def get_deck_progress(self, deck_id: str, card_ids: Iterable[str]) -> int:
        """Number of the given cards currently marked mastered."""
        deck = self.progress.get(deck_id, {})
        return sum(1 for card_id in card_ids
                   if card_id in deck and deck[card_id].status == "mastered")

    def get_last_attempt(self, deck_id: str) -> Optional[str]:
        stamps = [p.last_attempt for p in self.progress.get(deck_id, {}).values() if p.last_attempt]
        return max(stamps) if stamps else None

    def get_last_correct(self, deck_id: str) -> Optional[str]:
        stamps = [p.last_correct for p in self.progress.get(deck_id, {}).values() if p.last_correct]
        return max(stamps) if stamps else None

    def count_by_status(self, deck_id: str, status: ProgressStatus) -> int:
        return sum(1 for p in self.progress.get(deck_id, {}).values() if p.status == status)

    def start_session(self, deck_id: str, total_cards: int) -> StudySession:
        self.current_session = StudySession(id=str(uuid.uuid4()), deck_id=deck_id,
                                            start_time=now_iso(), total_cards=total_cards)
        return self.current_session

    async def end_session(self) -> Optional[StudySession]:
        session = self.current_session
        if session is None:
            return None
        end_time = now_iso()
        elapsed = parse_iso(end_time) - parse_iso(session.start_time)
        completed = session.model_copy(update={
            "end_time": end_time,
            "time_spent_ms": int(elapsed.total_seconds() * 1000),
            "mastered_cards": self.count_by_status(session.deck_id, "mastered"),
            "learning_cards": self.count_by_status(session.deck_id, "learning"),
        })
        self.sessions = [*self.sessions, completed]
        self.current_session = None
        await self._persist()
        return completed

    def get_sessions_by_deck(self, deck_id: str) -> List[StudySession]:
        return [s for s in self.sessions if s.deck_id == deck_id]

    async def reset_all(self) -> None:
        self.reset_memory_only()
        await self._delete()

    def reset_memory_only(self) -> None:
        self.progress = {}
        self.sessions = []
        self.current_session = None
