from calendar_events.constants import UpdateScope
from calendar_events.exceptions import InvalidScopeError, OccurrenceNotFoundError
from calendar_events.models import CalendarEvent
from calendar_events.services.dataclasses import ScopeResolution


class ScopedMutationResolver:
    """
    Decides which occurrences an update or delete applies to.
    """

    @staticmethod
    def parse_scope(scope: str | None) -> UpdateScope:
        if scope is None or scope == "":
            return UpdateScope.SINGLE
        try:
            return UpdateScope(scope)
        except ValueError as e:
            raise InvalidScopeError() from e

    def resolve(
        self, organization_id: int, event_id: int, scope: str | None = None
    ) -> ScopeResolution:
        """
        Resolve the occurrences affected by a mutation of ``event_id`` with ``scope``.
        :param organization_id: ID of the organization that owns the event.
        :param event_id: ID of the occurrence the mutation was requested on.
        :param scope: `single` (default), `future` or `all`.
        :return: The target occurrence, the affected occurrence IDs ordered by date and,
            for `all`, the ID of the series configuration.
        """
        parsed_scope = self.parse_scope(scope)

        target = (
            CalendarEvent.objects.filter_by_organization(organization_id)
            .filter(id=event_id)
            .first()
        )
        if target is None:
            raise OccurrenceNotFoundError()

        if parsed_scope == UpdateScope.SINGLE or target.recurring_config_id is None:
            return ScopeResolution(target=target, event_ids=[target.pk])

        siblings = CalendarEvent.objects.filter_by_organization(organization_id).filter_by_series(
            target.recurring_config_id
        )
        if parsed_scope == UpdateScope.FUTURE:
            event_ids = list(
                siblings.filter_from_date(target.date)
                .order_by("date", "start_time", "id")
                .values_list("id", flat=True)
            )
            return ScopeResolution(target=target, event_ids=event_ids)

        event_ids = list(siblings.order_by("date", "start_time", "id").values_list("id", flat=True))
        return ScopeResolution(
            target=target,
            event_ids=event_ids,
            recurring_config_id=target.recurring_config_id,
        )
