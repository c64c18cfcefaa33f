from django.contrib import admin

from customers.models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "email", "organization")
    list_filter = ("organization",)
    search_fields = ("name", "email")
