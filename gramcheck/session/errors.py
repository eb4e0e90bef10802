"""
Session Errors

Error taxonomy for the session/auth coordination layer.
"""


class AuthError(Exception):
    """Base class for session and authorization failures."""

    status_code = 400

    def __init__(self, message, reason=None):
        super().__init__(message)
        self.message = message
        self.reason = reason


class InvalidInput(AuthError, ValueError):
    """Login data is missing a required attribute."""


class MalformedStorage(AuthError):
    """A stored value could not be decoded. Always absorbed by the reader."""

    def __init__(self, key, message):
        super().__init__(f'Malformed value under {key!r}: {message}')
        self.key = key


class Unauthorized(AuthError):
    """The current session lacks the capability a page or endpoint needs."""

    status_code = 403


class NoActiveSession(AuthError):
    """Nothing is logged in on the current tab."""

    status_code = 401
