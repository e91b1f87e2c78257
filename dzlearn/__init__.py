"""dzlearn: local accounts and per-user study data for the Dzardzongke flashcard app."""
from .app import App, build_app
from .config import Config
from .errors import (DuplicateUserError, DzlearnError, InvalidCredentialsError, NotFoundError,
                     StorageError, ValidationError)
from .session import SessionContext, SessionManager, SessionState

__version__ = "1.0.0"
