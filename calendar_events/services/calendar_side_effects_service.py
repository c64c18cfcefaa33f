import logging
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from django.contrib.auth.models import AbstractBaseUser

from calendar_events.services.dataclasses import CalendarEventData
from organizations.models import Organization


logger = logging.getLogger(__name__)

EventChange = tuple[CalendarEventData, CalendarEventData]

AUDITED_FIELDS = ("date", "start_time", "end_time", "status", "service_order_id", "title")


@runtime_checkable
class OnCreateEventsHandler(Protocol):
    def on_create_events(
        self,
        actor: AbstractBaseUser | None,
        events: list[CalendarEventData],
        organization: Organization,
    ) -> None:
        ...


@runtime_checkable
class OnUpdateEventsHandler(Protocol):
    def on_update_events(
        self,
        actor: AbstractBaseUser | None,
        changes: list[EventChange],
        organization: Organization,
    ) -> None:
        ...


@runtime_checkable
class OnDeleteEventsHandler(Protocol):
    def on_delete_events(
        self,
        actor: AbstractBaseUser | None,
        events: list[CalendarEventData],
        organization: Organization,
    ) -> None:
        ...


class CalendarEventAuditLogHandler:
    """Writes a log line for every calendar event state change."""

    def on_create_events(self, actor, events, organization) -> None:
        logger.info(
            "Created %s calendar event(s) %s in organization %s by %s",
            len(events),
            [event.id for event in events],
            organization.id,
            getattr(actor, "pk", None),
        )

    def on_update_events(self, actor, changes, organization) -> None:
        for previous, current in changes:
            changed = sorted(
                name
                for name in AUDITED_FIELDS
                if getattr(previous, name) != getattr(current, name)
            )
            logger.info(
                "Updated calendar event %s in organization %s by %s, changed: %s",
                current.id,
                organization.id,
                getattr(actor, "pk", None),
                changed,
            )

    def on_delete_events(self, actor, events, organization) -> None:
        logger.info(
            "Deleted %s calendar event(s) %s in organization %s by %s",
            len(events),
            [event.id for event in events],
            organization.id,
            getattr(actor, "pk", None),
        )


class CalendarSideEffectsService:
    def __init__(
        self,
        side_effects_pipeline: Iterable[
            OnCreateEventsHandler | OnUpdateEventsHandler | OnDeleteEventsHandler
        ],
    ):
        self.side_effects_pipeline = side_effects_pipeline

    def on_create_events(
        self,
        actor: AbstractBaseUser | None,
        events: list[CalendarEventData],
        organization: Organization,
    ) -> None:
        """Handle side effects when calendar events are created."""
        for handler in self.side_effects_pipeline:
            if isinstance(handler, OnCreateEventsHandler):
                handler.on_create_events(actor, events, organization)

    def on_update_events(
        self,
        actor: AbstractBaseUser | None,
        changes: list[EventChange],
        organization: Organization,
    ) -> None:
        """
        Handle side effects when calendar events are updated.
        :param changes: `(previous, current)` snapshots, one per updated event.
        """
        for handler in self.side_effects_pipeline:
            if isinstance(handler, OnUpdateEventsHandler):
                handler.on_update_events(actor, changes, organization)

    def on_delete_events(
        self,
        actor: AbstractBaseUser | None,
        events: list[CalendarEventData],
        organization: Organization,
    ) -> None:
        """Handle side effects when calendar events are deleted."""
        for handler in self.side_effects_pipeline:
            if isinstance(handler, OnDeleteEventsHandler):
                handler.on_delete_events(actor, events, organization)
