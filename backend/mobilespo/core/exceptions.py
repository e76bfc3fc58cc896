"""
Exceptions shared across the Mobile Spo backend.

Kept in core/ so services, routers and the USSD package can all raise
and catch the same types without circular imports.
"""


class MobileSpoError(Exception):
    """Base class for errors raised by this service."""


class NotificationError(MobileSpoError):
    """
    Raised when a notification cannot be handed to its channel.

    Carries the channel name so callers can log which delivery path failed.
    """

    def __init__(self, channel, details=None):
        self.channel = channel
        self.details = details or "Notification delivery failed."
        super().__init__(f"[{channel}] {self.details}")


class InvalidTokenError(MobileSpoError):
    """Raised when an access token is missing, malformed or expired."""
