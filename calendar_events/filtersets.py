from django_filters import rest_framework as filters

from calendar_events.constants import CalendarEventStatus
from calendar_events.models import CalendarEvent
from calendar_events.services.dataclasses import CalendarEventListFilters


class CalendarEventFilterSet(filters.FilterSet):
    """
    FilterSet for CalendarEvent model.
    Completed events are only listed when filtering by status.
    """

    start_date = filters.DateFilter(
        field_name="date",
        lookup_expr="gte",
        label="Date (greater than or equal to)",
    )
    end_date = filters.DateFilter(
        field_name="date",
        lookup_expr="lte",
        label="Date (less than or equal to)",
    )
    technician_id = filters.NumberFilter(
        field_name="technicians",
        label="Filter by technician ID",
    )
    customer_id = filters.NumberFilter(
        field_name="customer_id",
        label="Filter by customer ID",
    )
    status = filters.ChoiceFilter(
        choices=CalendarEventStatus.choices,
        label="Filter by status",
    )

    class Meta:
        model = CalendarEvent
        fields = (
            "start_date",
            "end_date",
            "technician_id",
            "customer_id",
            "status",
        )

    def to_list_filters(self) -> CalendarEventListFilters:
        cleaned_data = self.form.cleaned_data
        technician_id = cleaned_data.get("technician_id")
        customer_id = cleaned_data.get("customer_id")
        return CalendarEventListFilters(
            start_date=cleaned_data.get("start_date"),
            end_date=cleaned_data.get("end_date"),
            technician_id=int(technician_id) if technician_id is not None else None,
            customer_id=int(customer_id) if customer_id is not None else None,
            status=cleaned_data.get("status") or None,
        )
