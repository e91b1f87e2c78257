"""Pydantic records shared by the credential table and the user-scoped stores.

Python attributes are snake_case; the JSON documents written to the secure
store keep the camelCase names the mobile app has always used.
"""
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ProgressStatus = Literal["new", "learning", "mastered"]
LanguageCode = Literal["dz", "qu"]
SavedSource = Literal["deck", "dictionary"]

def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

def parse_iso(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class UserRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: str
    password_hash: str = Field(..., repr=False)
    salt: str = Field(..., repr=False)
    iters: int
    created_at: int  # epoch ms


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class CardProgress(_Document):
    status: ProgressStatus
    last_attempt: Optional[str] = Field(None, alias="lastAttempt")
    last_correct: Optional[str] = Field(None, alias="lastCorrect")


class StudySession(_Document):
    id: str
    deck_id: str = Field(..., alias="deckId")
    start_time: str = Field(..., alias="startTime")
    end_time: str = Field("", alias="endTime")
    total_cards: int = Field(..., alias="totalCards")
    mastered_cards: int = Field(0, alias="masteredCards")
    learning_cards: int = Field(0, alias="learningCards")
    time_spent_ms: int = Field(0, alias="timeSpentMs")


class SavedItem(_Document):
    id: str
    prompt: str
    answer: str
    language: LanguageCode
    explanation: str
    notes: Optional[str] = None
    source: SavedSource
    deck_id: Optional[str] = Field(None, alias="deckId")
    card_id: Optional[str] = Field(None, alias="cardId")
    created_at: str = Field(..., alias="createdAt")
