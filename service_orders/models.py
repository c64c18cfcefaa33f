from django.db import models

from organizations.models import OrganizationModel
from service_orders.constants import ServiceOrderStatus


class ServiceOrder(OrganizationModel):
    """
    A work order for a customer. Calendar events may be linked to it, and its status follows
    the lifecycle of the linked events.
    """

    order_number = models.CharField(max_length=50, blank=True)
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="service_orders",
    )
    status = models.CharField(
        max_length=30,
        choices=ServiceOrderStatus,
        default=ServiceOrderStatus.PENDING,
        db_index=True,
    )
    scheduled_date = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return self.order_number or f"Service order {self.pk}"
