import datetime
import logging

from service_orders.models import ServiceOrder


logger = logging.getLogger(__name__)


class ServiceOrderService:
    """
    Tenant-scoped access to service orders for the calendar engine.
    """

    def find_by_id_and_organization(
        self, service_order_id: int, organization_id: int
    ) -> ServiceOrder | None:
        return (
            ServiceOrder.objects.filter_by_organization(organization_id)
            .filter(id=service_order_id)
            .first()
        )

    def update_status(
        self,
        service_order_id: int,
        organization_id: int,
        status: str,
        scheduled_date: datetime.datetime | None = None,
        completed_at: datetime.datetime | None = None,
    ) -> ServiceOrder | None:
        """
        Set the status of a service order, together with its scheduling or completion date.
        :param service_order_id: ID of the service order.
        :param organization_id: ID of the organization that owns it.
        :param status: New status.
        :param scheduled_date: Date the order is scheduled for, when moving to `scheduled`.
        :param completed_at: Completion timestamp, when moving to `completed`.
        :return: The updated service order or None if it does not exist in the organization.
        """
        service_order = self.find_by_id_and_organization(service_order_id, organization_id)
        if service_order is None:
            logger.warning(
                "Service order %s not found in organization %s, status %s not applied",
                service_order_id,
                organization_id,
                status,
            )
            return None

        update_fields = ["status", "modified"]
        service_order.status = status
        if scheduled_date is not None:
            service_order.scheduled_date = scheduled_date
            update_fields.append("scheduled_date")
        if completed_at is not None:
            service_order.completed_at = completed_at
            update_fields.append("completed_at")
        service_order.save(update_fields=update_fields)

        logger.info(
            "Service order %s moved to %s (organization %s)",
            service_order_id,
            status,
            organization_id,
        )
        return service_order
