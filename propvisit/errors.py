"""Typed errors raised by the data layer.

Every recognized failure maps to exactly one subclass of PropVisitError.
Store I/O problems surface as StoreUnavailable and malformed stored blobs as
CorruptStore; neither is ever turned into an empty result.
"""

from __future__ import annotations


class PropVisitError(Exception):
    """Base exception for all data layer failures."""

    code = "propvisit_error"
    default_message = "Data layer error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateEmail(PropVisitError):
    code = "duplicate_email"
    default_message = "Email already registered"


class UserNotFound(PropVisitError):
    code = "user_not_found"
    default_message = "User not found"


class InvalidCredentials(PropVisitError):
    code = "invalid_credentials"
    default_message = "Incorrect password"


class NotAuthenticated(PropVisitError):
    code = "not_authenticated"
    default_message = "No authenticated user"


class InvalidInput(PropVisitError):
    code = "invalid_input"
    default_message = "Invalid input"


class PropertyNotFound(InvalidInput):
    """The referenced property does not exist or belongs to another user."""

    code = "property_not_found"
    default_message = "Property not found"


class CorruptStore(PropVisitError):
    code = "corrupt_store"
    default_message = "Stored data could not be parsed"


class StoreUnavailable(PropVisitError):
    code = "store_unavailable"
    default_message = "Key-value store is unavailable"


class InvalidSessionState(PropVisitError):
    """A session transition was requested from a state that does not allow it."""

    code = "invalid_session_state"
    default_message = "Session state does not allow this operation"
