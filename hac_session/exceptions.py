"""Exceptions raised inside the HAC session client."""


class HACError(Exception):
    """Base exception for HAC errors."""


class HACConnectionError(HACError):
    """The portal could not be reached or did not answer in time."""


class HACAuthError(HACError):
    """The login handshake did not reach an authenticated state."""
