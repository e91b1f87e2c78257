"""Errors raised by the auth and storage layer.

Messages are shown to the user as-is, so they never carry salts, hashes or
iteration counts.
"""


class DzlearnError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DzlearnError):
    """Bad input, rejected before any storage access."""


class DuplicateUserError(DzlearnError):
    def __init__(self, message: str = "Username already exists"):
        super().__init__(message)


class NotFoundError(DzlearnError):
    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class InvalidCredentialsError(DzlearnError):
    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class StorageError(DzlearnError):
    """Opaque failure from the row store or the blob store."""
