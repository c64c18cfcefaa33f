from rest_framework import serializers

from calendar_events.constants import CalendarEventStatus, RecurrenceFrequency
from calendar_events.models import CalendarEvent, RecurringEventConfig
from calendar_events.services.dataclasses import (
    CalendarEventInputData,
    CalendarEventUpdateData,
    RecurrenceInputData,
    RecurrenceUpdateData,
)


class RecurringEventConfigSerializer(serializers.ModelSerializer):
    class Meta:
        model = RecurringEventConfig
        fields = (
            "id",
            "frequency",
            "interval",
            "days_of_week",
            "start_date",
            "until_date",
        )
        read_only_fields = fields


class DaysOfWeekField(serializers.ListField):
    child = serializers.IntegerField(min_value=0, max_value=6)


class RecurrenceInputSerializer(serializers.Serializer):
    frequency = serializers.ChoiceField(choices=RecurrenceFrequency.choices)
    interval = serializers.IntegerField(min_value=1, default=1)
    days_of_week = DaysOfWeekField(
        required=False,
        help_text="Weekdays for weekly recurrences, 0 = Sunday ... 6 = Saturday",
    )
    until_date = serializers.DateField()


class RecurrenceUpdateSerializer(serializers.Serializer):
    frequency = serializers.ChoiceField(choices=RecurrenceFrequency.choices, required=False)
    interval = serializers.IntegerField(min_value=1, required=False)
    days_of_week = DaysOfWeekField(required=False)
    until_date = serializers.DateField(required=False)


class CalendarEventSerializer(serializers.ModelSerializer):
    technicians = serializers.PrimaryKeyRelatedField(many=True, read_only=True)
    recurring_config = RecurringEventConfigSerializer(read_only=True)
    is_recurring = serializers.BooleanField(read_only=True)

    class Meta:
        model = CalendarEvent
        fields = (
            "id",
            "date",
            "start_time",
            "end_time",
            "title",
            "description",
            "status",
            "customer",
            "technicians",
            "service_order",
            "recurring_config",
            "is_recurring",
            "completed_at",
            "completed_by",
            "completion_notes",
            "created",
            "modified",
        )
        read_only_fields = fields


class CalendarEventCreateSerializer(serializers.Serializer):
    date = serializers.DateField()
    start_time = serializers.TimeField()
    end_time = serializers.TimeField()
    customer_id = serializers.IntegerField()
    technician_ids = serializers.ListField(child=serializers.IntegerField(), min_length=1)
    title = serializers.CharField(
        max_length=255,
        required=False,
        allow_blank=True,
        default="",
        help_text="Defaults to the customer name followed by the first technician name",
    )
    description = serializers.CharField(required=False, allow_blank=True, default="")
    service_order_id = serializers.IntegerField(required=False, allow_null=True)
    recurring_config = RecurrenceInputSerializer(
        required=False,
        allow_null=True,
        help_text="When set, a recurring series starting on `date` is created",
    )

    def to_input_data(self) -> CalendarEventInputData:
        data = dict(self.validated_data)
        recurrence = data.pop("recurring_config", None)
        return CalendarEventInputData(
            **data,
            recurring_config=RecurrenceInputData(**recurrence) if recurrence else None,
        )


class CalendarEventUpdateSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    start_time = serializers.TimeField(required=False)
    end_time = serializers.TimeField(required=False)
    customer_id = serializers.IntegerField(required=False)
    technician_ids = serializers.ListField(
        child=serializers.IntegerField(), min_length=1, required=False
    )
    title = serializers.CharField(max_length=255, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=CalendarEventStatus.choices, required=False)
    completion_notes = serializers.CharField(required=False, allow_blank=True)
    service_order_id = serializers.IntegerField(required=False)
    recurring_config = RecurrenceUpdateSerializer(
        required=False,
        help_text="Recurrence rule changes, only accepted with scope `all`",
    )

    def to_update_data(self) -> CalendarEventUpdateData:
        data = dict(self.validated_data)
        recurrence = data.pop("recurring_config", None)
        return CalendarEventUpdateData(
            **data,
            recurring_config=RecurrenceUpdateData(**recurrence) if recurrence is not None else None,
        )


class CalendarEventCompleteSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True)


class CalendarEventDeletionResultSerializer(serializers.Serializer):
    deleted = serializers.BooleanField()
    deleted_count = serializers.IntegerField()
