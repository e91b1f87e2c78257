"""App state kept in the secure store: per-user progress and saved items, app-wide language."""
from .language import LanguageStore
from .progress import ProgressStore
from .saved import SavedStore
