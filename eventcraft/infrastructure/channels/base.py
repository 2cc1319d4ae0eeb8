"""Common interface implemented by external delivery channels."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ChannelMessage:
    """Payload handed to a channel for a single recipient."""

    to: str
    body: str
    subject: str | None = None


@dataclass(frozen=True)
class ChannelResult:
    """Outcome of a single delivery attempt."""

    success: bool
    provider_id: str | None = None
    error: str | None = None

    @classmethod
    def ok(cls, provider_id: str | None = None) -> "ChannelResult":
        return cls(success=True, provider_id=provider_id)

    @classmethod
    def failed(cls, error: str) -> "ChannelResult":
        return cls(success=False, error=error)


class DeliveryChannel(ABC):
    """Wrapper around a third-party transport.

    Implementations must not raise: every failure is reported through a
    :class:`ChannelResult` with ``success=False`` so that one channel never
    prevents the others from being attempted.
    """

    @property
    @abstractmethod
    def channel_name(self) -> str:
        """Channel identifier (``email`` or ``sms``)."""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether provider credentials are available."""

    @abstractmethod
    def send(self, message: ChannelMessage) -> ChannelResult:
        """Deliver ``message`` and report the outcome."""


__all__ = ["ChannelMessage", "ChannelResult", "DeliveryChannel"]
