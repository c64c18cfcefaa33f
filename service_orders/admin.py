from django.contrib import admin

from service_orders.models import ServiceOrder


@admin.register(ServiceOrder)
class ServiceOrderAdmin(admin.ModelAdmin):
    list_display = ("id", "order_number", "status", "scheduled_date", "completed_at", "organization")
    list_filter = ("status", "organization")
    search_fields = ("order_number",)
    raw_id_fields = ("customer",)
