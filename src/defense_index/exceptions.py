"""
Custom exceptions for the defense_index package.

This module defines a hierarchy of exceptions so callers can tell
validation failures apart from persistence and transport failures.
"""

from typing import Iterable, List, Optional


class DefenseIndexBaseError(Exception):
    """
    Base exception for all defense index errors.

    All custom exceptions in the package inherit from this class.
    """

    pass


class ConfigurationError(DefenseIndexBaseError):
    """
    Raised when there are configuration-related issues.

    This exception is used when:
    - Required configuration parameters are missing
    - Configuration values are invalid
    - The selected storage backend cannot be built
    """

    pass


class DuplicateIdError(DefenseIndexBaseError):
    """
    Raised when an add would introduce an id that already exists.

    The caller must choose a different id or treat the operation as an
    update of the existing record.
    """

    def __init__(self, kind: str, item_id: str):
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"{kind} id '{item_id}' already exists")


class InvalidCandidateError(DefenseIndexBaseError):
    """
    Raised when a generated candidate entity cannot be admitted.

    Covers:
    - Missing required identity fields
    - A stats object whose keys differ from the registered stat ids
    - Non-numeric or out-of-range stat values
    - Collisions with an existing id or name

    The caller must discard the candidate; nothing may be inserted.
    """

    def __init__(self, message: str, problems: Optional[Iterable[str]] = None):
        self.problems: List[str] = list(problems or [])
        if self.problems:
            message = f"{message}: " + "; ".join(self.problems)
        super().__init__(message)


class PersistenceError(DefenseIndexBaseError):
    """
    Raised when a write to the shared document cannot be committed.

    The caller must not assume local and remote state are consistent and
    must surface the failure to the admin.
    """

    pass


class TransportInterruptedError(DefenseIndexBaseError):
    """
    Raised when the shared document cannot be read for delivery.

    Subscribers never see this exception; the channel resolves them to a
    ``None`` document instead.
    """

    pass


class NotAuthenticatedError(DefenseIndexBaseError):
    """
    Raised when a mutation entry point is called without a signed-in user.
    """

    pass
