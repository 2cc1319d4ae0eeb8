"""Delivery channels wrapping the email and SMS providers."""

from .base import ChannelMessage, ChannelResult, DeliveryChannel
from .email import SendGridEmailChannel
from .sms import TwilioSmsChannel

__all__ = [
    "ChannelMessage",
    "ChannelResult",
    "DeliveryChannel",
    "SendGridEmailChannel",
    "TwilioSmsChannel",
]
