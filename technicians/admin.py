from django.contrib import admin

from technicians.models import Technician


@admin.register(Technician)
class TechnicianAdmin(admin.ModelAdmin):
    list_display = ("id", "first_name", "last_name", "email", "organization")
    list_filter = ("organization",)
    search_fields = ("first_name", "last_name", "email")
