"""Errors raised by the notification use cases."""


class NotificationValidationError(ValueError):
    """The request is incomplete or malformed; nothing was persisted."""


class NotificationNotFoundError(LookupError):
    """A recipient, notification or event could not be found.

    Also raised when a notification exists but belongs to another user, so
    callers cannot discover other users' records.
    """


__all__ = ["NotificationNotFoundError", "NotificationValidationError"]
