"""Persistence helpers for notification entities."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any

from sqlalchemy import or_
from sqlalchemy.orm import Session

from eventcraft.domain.entities import (
    CHANNEL_NAMES,
    DELIVERY_STATUS_DELIVERED,
    DELIVERY_STATUS_FAILED,
    NOTIFICATION_STATUS_PENDING,
    NOTIFICATION_STATUS_READ,
    NOTIFICATION_STATUS_SENT,
    UNREAD_COUNTABLE_STATUSES,
    ChannelSet,
    ChannelState,
    Notification,
    NotificationAction,
    NotificationPage,
)
from eventcraft.infrastructure.models import NotificationModel
from eventcraft.utils import from_storage, storage_now, to_storage


def _channel_column(channel: str, attribute: str):
    if channel not in CHANNEL_NAMES:
        raise ValueError(f"Unknown notification channel '{channel}'")
    return getattr(NotificationModel, f"{channel}_{attribute}")


class NotificationRepository:
    """Provide persistence operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel()
        self._apply_entity_to_model(model, notification)
        now = storage_now()
        model.created_at = to_storage(notification.created_at) or now
        model.updated_at = model.created_at
        if model.scheduled_for is None:
            model.scheduled_for = model.created_at
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def get(self, notification_id: int) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model else None

    def get_for_recipient(
        self, notification_id: int, user_id: int
    ) -> Notification | None:
        model = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.id == notification_id)
            .filter(NotificationModel.recipient_id == user_id)
            .one_or_none()
        )
        return self._to_entity(model) if model else None

    def list_for_user(
        self,
        user_id: int,
        *,
        page: int = 1,
        limit: int = 20,
        category: str | None = None,
        is_read: bool | None = None,
        priority: str | None = None,
    ) -> NotificationPage:
        page = max(page, 1)
        limit = max(limit, 1)
        query = self.session.query(NotificationModel).filter(
            NotificationModel.recipient_id == user_id
        )
        if category:
            query = query.filter(NotificationModel.category == category)
        if is_read is not None:
            query = query.filter(NotificationModel.is_read.is_(is_read))
        if priority:
            query = query.filter(NotificationModel.priority == priority)

        total = query.count()
        models = (
            query.order_by(
                NotificationModel.created_at.desc(), NotificationModel.id.desc()
            )
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return NotificationPage(
            items=[self._to_entity(model) for model in models],
            total=total,
            page=page,
            pages=math.ceil(total / limit),
        )

    def count_unread(self, user_id: int) -> int:
        return (
            self.session.query(NotificationModel)
            .filter(NotificationModel.recipient_id == user_id)
            .filter(NotificationModel.is_read.is_(False))
            .filter(NotificationModel.status.in_(UNREAD_COUNTABLE_STATUSES))
            .count()
        )

    def list_due(self, now: datetime) -> list[Notification]:
        """Pending notifications whose scheduled time has passed.

        Records with a failed channel stay pending and are returned again;
        ``send_notification`` only retries the channels not yet sent.
        """

        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.status == NOTIFICATION_STATUS_PENDING)
            .filter(NotificationModel.scheduled_for <= to_storage(now))
            .order_by(NotificationModel.scheduled_for.asc(), NotificationModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def mark_read(self, notification_id: int) -> Notification | None:
        """Mark the notification as read once; later calls leave it untouched."""

        now = storage_now()
        self.session.query(NotificationModel).filter(
            NotificationModel.id == notification_id,
            NotificationModel.is_read.is_(False),
        ).update(
            {
                NotificationModel.is_read: True,
                NotificationModel.read_at: now,
                NotificationModel.status: NOTIFICATION_STATUS_READ,
                NotificationModel.updated_at: now,
            },
            synchronize_session=False,
        )
        self.session.commit()
        return self.get(notification_id)

    def mark_all_read(self, user_id: int) -> int:
        now = storage_now()
        modified = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.recipient_id == user_id,
                NotificationModel.is_read.is_(False),
            )
            .update(
                {
                    NotificationModel.is_read: True,
                    NotificationModel.read_at: now,
                    NotificationModel.status: NOTIFICATION_STATUS_READ,
                    NotificationModel.updated_at: now,
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return modified

    def mark_channel_sent(
        self,
        notification_id: int,
        channel: str,
        *,
        delivery_status: str | None = DELIVERY_STATUS_DELIVERED,
    ) -> None:
        now = storage_now()
        self.session.query(NotificationModel).filter(
            NotificationModel.id == notification_id
        ).update(
            {
                _channel_column(channel, "sent"): True,
                _channel_column(channel, "sent_at"): now,
                _channel_column(channel, "delivery_status"): delivery_status,
                NotificationModel.updated_at: now,
            },
            synchronize_session=False,
        )
        self.session.commit()
        self.settle_status(notification_id)

    def mark_channel_failed(self, notification_id: int, channel: str) -> None:
        now = storage_now()
        self.session.query(NotificationModel).filter(
            NotificationModel.id == notification_id
        ).update(
            {
                _channel_column(channel, "delivery_status"): DELIVERY_STATUS_FAILED,
                NotificationModel.updated_at: now,
            },
            synchronize_session=False,
        )
        self.session.commit()

    def settle_status(self, notification_id: int) -> bool:
        """Flip a pending notification to ``sent`` once every enabled channel is sent.

        The check runs inside the UPDATE statement so concurrent channel
        updates on the same row cannot overwrite each other's result.
        """

        conditions = [
            or_(
                _channel_column(channel, "enabled").is_(False),
                _channel_column(channel, "sent").is_(True),
            )
            for channel in CHANNEL_NAMES
        ]
        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id == notification_id,
                NotificationModel.status == NOTIFICATION_STATUS_PENDING,
                *conditions,
            )
            .update(
                {
                    NotificationModel.status: NOTIFICATION_STATUS_SENT,
                    NotificationModel.updated_at: storage_now(),
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return bool(updated)

    def delete_owned_by(self, notification_id: int, user_id: int) -> int:
        deleted = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id == notification_id,
                NotificationModel.recipient_id == user_id,
            )
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted

    def purge_expired(self, now: datetime) -> int:
        deleted = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.expires_at.is_not(None))
            .filter(NotificationModel.expires_at <= to_storage(now))
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted

    @staticmethod
    def _apply_entity_to_model(
        model: NotificationModel, notification: Notification
    ) -> None:
        model.recipient_id = notification.recipient_id
        model.title = notification.title
        model.message = notification.message
        model.category = notification.category
        model.status = notification.status
        model.is_read = notification.is_read
        model.read_at = to_storage(notification.read_at)
        for channel, state in notification.channels.items():
            setattr(model, f"{channel}_enabled", state.enabled)
            setattr(model, f"{channel}_sent", state.sent)
            setattr(model, f"{channel}_sent_at", to_storage(state.sent_at))
            setattr(model, f"{channel}_delivery_status", state.delivery_status)
        model.related_event_id = notification.related_event_id
        model.related_ticket_id = notification.related_ticket_id
        model.action = _action_to_payload(notification.action)
        model.extra = notification.metadata or {}
        model.priority = notification.priority
        model.expires_at = to_storage(notification.expires_at)
        model.scheduled_for = to_storage(notification.scheduled_for)

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        channels = ChannelSet(
            **{
                channel: ChannelState(
                    enabled=bool(getattr(model, f"{channel}_enabled")),
                    sent=bool(getattr(model, f"{channel}_sent")),
                    sent_at=from_storage(getattr(model, f"{channel}_sent_at")),
                    delivery_status=getattr(model, f"{channel}_delivery_status"),
                )
                for channel in CHANNEL_NAMES
            }
        )
        return Notification(
            id=model.id,
            recipient_id=model.recipient_id,
            title=model.title,
            message=model.message,
            category=model.category,
            status=model.status,
            is_read=bool(model.is_read),
            read_at=from_storage(model.read_at),
            channels=channels,
            related_event_id=model.related_event_id,
            related_ticket_id=model.related_ticket_id,
            action=_action_from_payload(model.action),
            metadata=model.extra or {},
            priority=model.priority,
            expires_at=from_storage(model.expires_at),
            scheduled_for=from_storage(model.scheduled_for),
            created_at=from_storage(model.created_at),
            updated_at=from_storage(model.updated_at),
        )


def _action_to_payload(action: NotificationAction | None) -> dict[str, Any] | None:
    if action is None:
        return None
    return {"text": action.text, "url": action.url, "type": action.type}


def _action_from_payload(payload: dict[str, Any] | None) -> NotificationAction | None:
    if not payload or not payload.get("url"):
        return None
    return NotificationAction(
        text=str(payload.get("text") or ""),
        url=str(payload["url"]),
        type=payload.get("type"),
    )


__all__ = ["NotificationRepository"]
