import dataclasses
import datetime
import logging
from collections.abc import Iterable
from typing import Annotated

from django.contrib.auth.models import AbstractBaseUser
from django.db import transaction
from django.utils import timezone

from dependency_injector.wiring import Provide, inject

from calendar_events.constants import ALLOWED_STATUS_TRANSITIONS, CalendarEventStatus, UpdateScope
from calendar_events.exceptions import (
    InvalidDateRangeError,
    InvalidParticipantsError,
    InvalidServiceOrderError,
    InvalidStatusTransitionError,
    InvalidTimeWindowError,
    OccurrenceNotFoundError,
    SeriesRuleScopeError,
)
from calendar_events.models import CalendarEvent, RecurringEventConfig
from calendar_events.querysets import CalendarEventQuerySet
from calendar_events.recurrence_utils import RecurrenceExpander, RecurrenceRule
from calendar_events.services.calendar_side_effects_service import CalendarSideEffectsService
from calendar_events.services.dataclasses import (
    CalendarEventData,
    CalendarEventInputData,
    CalendarEventListFilters,
    CalendarEventUpdateData,
    DeletionResult,
    RecurrenceUpdateData,
    ScopeResolution,
)
from calendar_events.services.protocols.work_order_gateway import WorkOrderGateway
from calendar_events.services.scope_resolver import ScopedMutationResolver
from customers.models import Customer
from organizations.models import Organization
from technicians.models import Technician


logger = logging.getLogger(__name__)


def build_default_title(customer: Customer, technicians: list[Technician]) -> str:
    technician_name = technicians[0].get_full_name() if technicians else ""
    return f"{customer.name} - {technician_name}".strip()


def validate_time_window(start_time: datetime.time, end_time: datetime.time) -> None:
    if start_time >= end_time:
        raise InvalidTimeWindowError()


def validate_status_transition(from_status: str, to_status: str) -> None:
    if from_status == to_status:
        return
    if to_status not in ALLOWED_STATUS_TRANSITIONS.get(from_status, frozenset()):
        raise InvalidStatusTransitionError(from_status, to_status)


class CalendarEventService:
    """
    Creates, updates and deletes calendar events of an organization, expanding recurring
    series and keeping linked service orders in sync through the side effects pipeline.
    """

    @inject
    def __init__(
        self,
        calendar_side_effects_service: Annotated[
            "CalendarSideEffectsService | None", Provide["calendar_side_effects_service"]
        ] = None,
        work_order_gateway: Annotated[
            "WorkOrderGateway | None", Provide["service_order_service"]
        ] = None,
        scope_resolver: ScopedMutationResolver | None = None,
        recurrence_expander: RecurrenceExpander | None = None,
    ) -> None:
        self.calendar_side_effects_service = calendar_side_effects_service
        self.work_order_gateway = work_order_gateway
        self.scope_resolver = scope_resolver or ScopedMutationResolver()
        self.recurrence_expander = recurrence_expander or RecurrenceExpander()

    @staticmethod
    def _actor_or_none(actor: AbstractBaseUser | None) -> AbstractBaseUser | None:
        if actor is not None and getattr(actor, "is_authenticated", False):
            return actor
        return None

    def _get_customer(self, organization: Organization, customer_id: int) -> Customer:
        customer = (
            Customer.objects.filter_by_organization(organization.id).filter(id=customer_id).first()
        )
        if customer is None:
            raise InvalidParticipantsError(f"Customer {customer_id} not found")
        return customer

    def _get_technicians(
        self, organization: Organization, technician_ids: Iterable[int]
    ) -> list[Technician]:
        """
        Return the technicians in the order their IDs were given.
        """
        unique_ids = list(dict.fromkeys(technician_ids))
        if not unique_ids:
            raise InvalidParticipantsError("At least one technician is required")

        technicians_by_id = {
            technician.pk: technician
            for technician in Technician.objects.filter_by_organization(organization.id).filter(
                id__in=unique_ids
            )
        }
        missing = [
            technician_id for technician_id in unique_ids if technician_id not in technicians_by_id
        ]
        if missing:
            raise InvalidParticipantsError(f"Technicians {missing} not found")
        return [technicians_by_id[technician_id] for technician_id in unique_ids]

    @staticmethod
    def _set_technicians(event: CalendarEvent, technicians: list[Technician]) -> None:
        technician_through = CalendarEvent.technicians.through
        technician_through.objects.filter(calendarevent_id=event.pk).delete()
        technician_through.objects.bulk_create(
            [
                technician_through(calendarevent_id=event.pk, technician_id=technician.pk)
                for technician in technicians
            ]
        )

    @staticmethod
    def _get_event_technicians(event: CalendarEvent) -> list[Technician]:
        """
        Return the technicians of an event in the order they were assigned.
        """
        technician_through = CalendarEvent.technicians.through
        return [
            row.technician
            for row in technician_through.objects.filter(calendarevent_id=event.pk)
            .select_related("technician")
            .order_by("id")
        ]

    def _validate_service_order(self, organization: Organization, service_order_id: int) -> None:
        if self.work_order_gateway is None:
            return
        service_order = self.work_order_gateway.find_by_id_and_organization(
            service_order_id, organization.id
        )
        if service_order is None:
            raise InvalidServiceOrderError(f"Service order {service_order_id} not found")

    def _bulk_create_occurrences(
        self,
        organization: Organization,
        actor: AbstractBaseUser | None,
        dates: Iterable[datetime.date],
        template: CalendarEvent,
        technician_ids: list[int],
    ) -> list[CalendarEvent]:
        events = CalendarEvent.objects.bulk_create(
            [
                CalendarEvent(
                    organization=organization,
                    date=date,
                    start_time=template.start_time,
                    end_time=template.end_time,
                    title=template.title,
                    description=template.description,
                    status=CalendarEventStatus.SCHEDULED,
                    customer_id=template.customer_id,
                    service_order_id=template.service_order_id,
                    recurring_config_id=template.recurring_config_id,
                    created_by=actor,
                    updated_by=actor,
                )
                for date in dates
            ]
        )
        technician_through = CalendarEvent.technicians.through
        technician_through.objects.bulk_create(
            [
                technician_through(calendarevent_id=event.pk, technician_id=technician_id)
                for event in events
                for technician_id in technician_ids
            ]
        )
        return events

    def _delete_events(
        self,
        organization: Organization,
        actor: AbstractBaseUser | None,
        events: list[CalendarEvent],
    ) -> int:
        if not events:
            return 0

        serialized_events = [CalendarEventData.from_event(event) for event in events]
        _, deleted_per_model = (
            CalendarEvent.objects.filter_by_organization(organization.id)
            .filter(id__in=[event.pk for event in events])
            .delete()
        )

        if self.calendar_side_effects_service:
            self.calendar_side_effects_service.on_delete_events(
                actor, serialized_events, organization
            )
        return deleted_per_model.get(CalendarEvent._meta.label, 0)

    def get_event(self, organization: Organization, event_id: int) -> CalendarEvent | None:
        return (
            CalendarEvent.objects.filter_by_organization(organization.id)
            .with_participants()
            .filter(id=event_id)
            .first()
        )

    def list_events(
        self, organization: Organization, filters: CalendarEventListFilters | None = None
    ) -> CalendarEventQuerySet:
        """
        List the calendar events of an organization ordered by date and start time.
        Completed events are left out unless a status filter is given.
        """
        filters = filters or CalendarEventListFilters()
        queryset = (
            CalendarEvent.objects.filter_by_organization(organization.id)
            .with_participants()
            .filter_by_date_range(filters.start_date, filters.end_date)
        )
        if filters.technician_id is not None:
            queryset = queryset.filter(technicians__id=filters.technician_id)
        if filters.customer_id is not None:
            queryset = queryset.filter(customer_id=filters.customer_id)
        if filters.status:
            queryset = queryset.filter(status=filters.status)
        else:
            queryset = queryset.exclude_completed()
        return queryset.order_by("date", "start_time", "id")

    def create_event(
        self,
        organization: Organization,
        actor: AbstractBaseUser | None,
        event_data: CalendarEventInputData,
    ) -> CalendarEvent | list[CalendarEvent]:
        """
        Create a calendar event.
        :param organization: Organization that owns the event.
        :param actor: User creating the event.
        :param event_data: Event data. When `recurring_config` is set, a recurring series is
            created starting on `event_data.date` instead of a single event.
        :return: The created event, or the list of occurrences of the created series.
        """
        if event_data.recurring_config is not None:
            return self.create_recurring_event(organization, actor, event_data)

        actor = self._actor_or_none(actor)
        with transaction.atomic():
            customer = self._get_customer(organization, event_data.customer_id)
            technicians = self._get_technicians(organization, event_data.technician_ids)
            validate_time_window(event_data.start_time, event_data.end_time)
            if event_data.service_order_id is not None:
                self._validate_service_order(organization, event_data.service_order_id)

            event = CalendarEvent.objects.create(
                organization=organization,
                date=event_data.date,
                start_time=event_data.start_time,
                end_time=event_data.end_time,
                title=event_data.title or build_default_title(customer, technicians),
                description=event_data.description,
                customer=customer,
                service_order_id=event_data.service_order_id,
                created_by=actor,
                updated_by=actor,
            )
            self._set_technicians(event, technicians)

            if self.calendar_side_effects_service:
                self.calendar_side_effects_service.on_create_events(
                    actor,
                    [CalendarEventData.from_event(event, [t.pk for t in technicians])],
                    organization,
                )

        return self.get_event(organization, event.pk)

    def create_recurring_event(
        self,
        organization: Organization,
        actor: AbstractBaseUser | None,
        event_data: CalendarEventInputData,
    ) -> list[CalendarEvent]:
        """
        Create a recurring series: one configuration plus one occurrence per date produced
        by the recurrence rule. Nothing is persisted when the rule is invalid.
        """
        recurrence = event_data.recurring_config
        if recurrence is None:
            raise ValueError("A recurring configuration is required to create a series")

        actor = self._actor_or_none(actor)
        with transaction.atomic():
            customer = self._get_customer(organization, event_data.customer_id)
            technicians = self._get_technicians(organization, event_data.technician_ids)
            validate_time_window(event_data.start_time, event_data.end_time)
            if event_data.service_order_id is not None:
                self._validate_service_order(organization, event_data.service_order_id)

            rule = RecurrenceRule(
                frequency=recurrence.frequency,
                start_date=event_data.date,
                until_date=recurrence.until_date,
                interval=recurrence.interval,
                days_of_week=tuple(recurrence.days_of_week),
            )
            dates = self.recurrence_expander.expand(rule)
            if not dates:
                raise InvalidDateRangeError("Recurrence does not produce any occurrence")

            recurring_config = RecurringEventConfig.objects.create(
                organization=organization,
                frequency=rule.frequency,
                interval=rule.interval,
                days_of_week=list(rule.days_of_week),
                start_date=rule.start_date,
                until_date=rule.until_date,
                created_by=actor,
                updated_by=actor,
            )
            template = CalendarEvent(
                organization=organization,
                start_time=event_data.start_time,
                end_time=event_data.end_time,
                title=event_data.title or build_default_title(customer, technicians),
                description=event_data.description,
                customer=customer,
                service_order_id=event_data.service_order_id,
                recurring_config=recurring_config,
            )
            technician_ids = [technician.pk for technician in technicians]
            events = self._bulk_create_occurrences(
                organization, actor, dates, template, technician_ids
            )

            logger.info(
                "Created recurring series %s with %s occurrences (%s) in organization %s",
                recurring_config.pk,
                len(events),
                rule.frequency,
                organization.id,
            )

            if self.calendar_side_effects_service:
                self.calendar_side_effects_service.on_create_events(
                    actor,
                    [CalendarEventData.from_event(event, technician_ids) for event in events],
                    organization,
                )

        return list(
            CalendarEvent.objects.filter_by_organization(organization.id)
            .with_participants()
            .filter_by_series(recurring_config.pk)
            .order_by("date", "start_time", "id")
        )

    def _apply_series_rule_update(
        self,
        organization: Organization,
        actor: AbstractBaseUser | None,
        resolution: ScopeResolution,
        rule_data: RecurrenceUpdateData,
    ) -> list[int]:
        """
        Update the series configuration and bring its occurrences in line with the new rule:
        occurrences on dates the rule no longer produces are deleted and missing dates are
        created from the target occurrence. Linked work orders are left as they are, since
        the series keeps pointing at the same work order.
        :return: IDs of the occurrences of the series after the update.
        """
        recurring_config = RecurringEventConfig.objects.filter_by_organization(
            organization.id
        ).get(id=resolution.recurring_config_id)
        current_rule = recurring_config.to_rule()
        rule = dataclasses.replace(
            current_rule,
            frequency=rule_data.frequency or current_rule.frequency,
            until_date=rule_data.until_date or current_rule.until_date,
            interval=rule_data.interval or current_rule.interval,
            days_of_week=(
                tuple(rule_data.days_of_week)
                if rule_data.days_of_week is not None
                else current_rule.days_of_week
            ),
        )
        dates = self.recurrence_expander.expand(rule)
        if not dates:
            raise InvalidDateRangeError("Recurrence does not produce any occurrence")

        recurring_config.frequency = rule.frequency
        recurring_config.interval = rule.interval
        recurring_config.days_of_week = list(rule.days_of_week)
        recurring_config.until_date = rule.until_date
        recurring_config.updated_by = actor
        recurring_config.save()

        series = CalendarEvent.objects.filter_by_organization(organization.id).filter_by_series(
            recurring_config.pk
        )
        wanted_dates = set(dates)
        existing_dates = set(series.values_list("date", flat=True))
        template = resolution.target
        template_technician_ids = [
            technician.pk for technician in self._get_event_technicians(template)
        ]

        _, deleted_per_model = series.exclude(date__in=wanted_dates).delete()
        created_events = self._bulk_create_occurrences(
            organization,
            actor,
            [date for date in dates if date not in existing_dates],
            template,
            template_technician_ids,
        )
        logger.info(
            "Recurring series %s re-expanded: %s occurrence(s) removed, %s added",
            recurring_config.pk,
            deleted_per_model.get(CalendarEvent._meta.label, 0),
            len(created_events),
        )

        return list(series.values_list("id", flat=True))

    def _apply_update(
        self,
        event: CalendarEvent,
        event_data: CalendarEventUpdateData,
        actor: AbstractBaseUser | None,
        now: datetime.datetime,
        apply_date: bool,
        customer: Customer | None,
        technicians: list[Technician] | None,
    ) -> list[int]:
        if apply_date and event_data.date is not None:
            event.date = event_data.date
        if event_data.start_time is not None:
            event.start_time = event_data.start_time
        if event_data.end_time is not None:
            event.end_time = event_data.end_time
        if event_data.description is not None:
            event.description = event_data.description
        if event_data.completion_notes is not None:
            event.completion_notes = event_data.completion_notes
        if customer is not None:
            event.customer = customer
        if event_data.service_order_id is not None:
            event.service_order_id = event_data.service_order_id

        if event_data.status is not None and event_data.status != event.status:
            event.status = event_data.status
            if event_data.status == CalendarEventStatus.COMPLETED:
                event.completed_at = now
                event.completed_by = actor

        current_technicians = (
            technicians
            if technicians is not None
            else self._get_event_technicians(event)
        )
        if event_data.title:
            event.title = event_data.title
        elif event_data.title is not None or event_data.changes_participants:
            event.title = build_default_title(event.customer, current_technicians)

        event.updated_by = actor
        event.save()
        if technicians is not None:
            self._set_technicians(event, technicians)
        return [technician.pk for technician in current_technicians]

    def update_event(
        self,
        organization: Organization,
        actor: AbstractBaseUser | None,
        event_id: int,
        event_data: CalendarEventUpdateData,
        scope: str | None = None,
    ) -> CalendarEvent | None:
        """
        Update a calendar event and, depending on the scope, the other occurrences of its
        series.
        :param organization: Organization that owns the event.
        :param actor: User updating the event.
        :param event_id: ID of the occurrence the update was requested on.
        :param event_data: Fields to change.
        :param scope: `single` (default), `future` or `all`. The date is only changed for
            `single` updates and recurrence rule changes require `all`.
        :return: The updated occurrence, or None if it does not exist in the organization.
        """
        actor = self._actor_or_none(actor)
        with transaction.atomic():
            try:
                resolution = self.scope_resolver.resolve(organization.id, event_id, scope)
            except OccurrenceNotFoundError:
                return None
            parsed_scope = self.scope_resolver.parse_scope(scope)

            if event_data.recurring_config is not None:
                if parsed_scope != UpdateScope.ALL:
                    raise SeriesRuleScopeError()
                if resolution.recurring_config_id is None:
                    raise SeriesRuleScopeError("Calendar event is not part of a recurring series")

            customer = (
                self._get_customer(organization, event_data.customer_id)
                if event_data.customer_id is not None
                else None
            )
            technicians = (
                self._get_technicians(organization, event_data.technician_ids)
                if event_data.technician_ids is not None
                else None
            )
            if event_data.service_order_id is not None:
                self._validate_service_order(organization, event_data.service_order_id)

            event_ids = resolution.event_ids
            if event_data.recurring_config is not None:
                event_ids = self._apply_series_rule_update(
                    organization, actor, resolution, event_data.recurring_config
                )

            events = list(
                CalendarEvent.objects.filter_by_organization(organization.id)
                .select_related("customer")
                .prefetch_related("technicians")
                .filter(id__in=event_ids)
                .order_by("date", "start_time", "id")
            )
            for event in events:
                validate_time_window(
                    event_data.start_time if event_data.start_time is not None else event.start_time,
                    event_data.end_time if event_data.end_time is not None else event.end_time,
                )
                if event_data.status is not None:
                    validate_status_transition(event.status, event_data.status)

            apply_date = parsed_scope == UpdateScope.SINGLE
            now = timezone.now()
            changes = []
            for event in events:
                previous = CalendarEventData.from_event(event)
                technician_ids = self._apply_update(
                    event, event_data, actor, now, apply_date, customer, technicians
                )
                changes.append((previous, CalendarEventData.from_event(event, technician_ids)))

            if changes and self.calendar_side_effects_service:
                self.calendar_side_effects_service.on_update_events(actor, changes, organization)

            logger.info(
                "Updated %s calendar event(s) from event %s with scope %s in organization %s",
                len(events),
                event_id,
                parsed_scope,
                organization.id,
            )

        updated_event = self.get_event(organization, resolution.target.pk)
        if updated_event is None and events:
            # the target date was dropped by a recurrence rule change
            updated_event = self.get_event(organization, events[0].pk)
        return updated_event

    def complete_event(
        self,
        organization: Organization,
        actor: AbstractBaseUser | None,
        event_id: int,
        notes: str | None = None,
    ) -> CalendarEvent:
        event = self.update_event(
            organization,
            actor,
            event_id,
            CalendarEventUpdateData(status=CalendarEventStatus.COMPLETED, completion_notes=notes),
            scope=UpdateScope.SINGLE,
        )
        if event is None:
            raise OccurrenceNotFoundError()
        return event

    def delete_event(
        self,
        organization: Organization,
        actor: AbstractBaseUser | None,
        event_id: int,
        scope: str | None = None,
    ) -> DeletionResult:
        """
        Delete a calendar event and, depending on the scope, the other occurrences of its
        series. Deleting `all` occurrences also deletes the series configuration.
        :return: Whether anything was deleted and how many occurrences were removed.
        """
        actor = self._actor_or_none(actor)
        with transaction.atomic():
            try:
                resolution = self.scope_resolver.resolve(organization.id, event_id, scope)
            except OccurrenceNotFoundError:
                return DeletionResult(deleted=False, deleted_count=0)

            events = list(
                CalendarEvent.objects.filter_by_organization(organization.id)
                .prefetch_related("technicians")
                .filter(id__in=resolution.event_ids)
            )
            deleted_count = self._delete_events(organization, actor, events)

            if resolution.recurring_config_id is not None:
                RecurringEventConfig.objects.filter_by_organization(organization.id).filter(
                    id=resolution.recurring_config_id
                ).delete()

            logger.info(
                "Deleted %s calendar event(s) from event %s with scope %s in organization %s",
                deleted_count,
                event_id,
                self.scope_resolver.parse_scope(scope),
                organization.id,
            )

        return DeletionResult(deleted=deleted_count > 0, deleted_count=deleted_count)

    @transaction.atomic()
    def delete_all_for_organization(self, organization: Organization) -> int:
        """
        Remove every calendar event and recurring configuration of an organization.
        Linked service orders are left as they are.
        """
        _, deleted_per_model = CalendarEvent.objects.filter_by_organization(
            organization.id
        ).delete()
        RecurringEventConfig.objects.filter_by_organization(organization.id).delete()

        deleted_count = deleted_per_model.get(CalendarEvent._meta.label, 0)
        logger.info(
            "Deleted all %s calendar event(s) of organization %s", deleted_count, organization.id
        )
        return deleted_count
