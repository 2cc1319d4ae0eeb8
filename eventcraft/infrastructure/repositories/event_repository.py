"""Read access to events for reminders and notification rendering."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Session

from eventcraft.domain.entities import EVENT_STATUS_PUBLISHED, Attendee, Event
from eventcraft.infrastructure.models import EventAttendeeModel, EventModel
from eventcraft.utils import from_storage, to_storage


class EventRepository:
    """Query events and update the hour-reminder flag."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, event_id: int) -> Event | None:
        model = self.session.get(EventModel, event_id)
        return self._to_entity(model) if model else None

    def create(self, event: Event) -> Event:
        model = EventModel(
            title=event.title,
            date=to_storage(event.date),
            location=event.location,
            category=event.category,
            status=event.status,
            organizer_id=event.organizer_id,
            hour_reminder_sent=event.hour_reminder_sent,
        )
        model.attendees = [
            EventAttendeeModel(
                user_id=attendee.user_id,
                ticket_type=attendee.ticket_type,
                checked_in=attendee.checked_in,
            )
            for attendee in event.attendees
        ]
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list_published_between(
        self,
        start: datetime,
        end: datetime,
        *,
        exclude_hour_reminded: bool = False,
    ) -> list[Event]:
        """Return published events whose date falls in ``[start, end)``."""

        query = (
            self.session.query(EventModel)
            .filter(EventModel.status == EVENT_STATUS_PUBLISHED)
            .filter(EventModel.date >= to_storage(start))
            .filter(EventModel.date < to_storage(end))
        )
        if exclude_hour_reminded:
            query = query.filter(EventModel.hour_reminder_sent.is_(False))
        query = query.order_by(EventModel.date.asc(), EventModel.id.asc())
        return [self._to_entity(model) for model in query.all()]

    def mark_hour_reminder_sent(self, event_id: int) -> None:
        self.session.query(EventModel).filter(EventModel.id == event_id).update(
            {EventModel.hour_reminder_sent: True}, synchronize_session=False
        )
        self.session.commit()

    @staticmethod
    def _to_entity(model: EventModel) -> Event:
        date = from_storage(model.date)
        assert date is not None
        return Event(
            id=model.id,
            title=model.title,
            date=date,
            location=model.location,
            organizer_id=model.organizer_id,
            category=model.category,
            status=model.status,
            hour_reminder_sent=bool(model.hour_reminder_sent),
            attendees=[
                Attendee(
                    user_id=attendee.user_id,
                    ticket_type=attendee.ticket_type,
                    checked_in=bool(attendee.checked_in),
                )
                for attendee in model.attendees
            ],
        )


__all__ = ["EventRepository"]
