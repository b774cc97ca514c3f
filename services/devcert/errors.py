"""Base exception types for devcert."""


class DevcertError(Exception):
    """Base exception for devcert failures."""
