from django.contrib import admin

from calendar_events.models import CalendarEvent, RecurringEventConfig


class CalendarEventInline(admin.TabularInline):
    model = CalendarEvent
    fields = ("date", "start_time", "end_time", "title", "status")
    readonly_fields = fields
    extra = 0
    can_delete = False
    show_change_link = True


@admin.register(RecurringEventConfig)
class RecurringEventConfigAdmin(admin.ModelAdmin):
    list_display = ("id", "frequency", "interval", "start_date", "until_date", "organization")
    list_filter = ("frequency", "organization")
    inlines = (CalendarEventInline,)


@admin.register(CalendarEvent)
class CalendarEventAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "date", "start_time", "end_time", "status", "organization")
    list_filter = ("status", "organization")
    search_fields = ("title", "customer__name")
    date_hierarchy = "date"
    raw_id_fields = (
        "customer",
        "technicians",
        "service_order",
        "recurring_config",
        "completed_by",
        "created_by",
        "updated_by",
    )
