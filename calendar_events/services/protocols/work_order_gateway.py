import datetime
from typing import Protocol


class WorkOrderGateway(Protocol):
    """
    Access to work orders owned by another part of the system.
    Both methods are scoped to the given organization.
    """

    def find_by_id_and_organization(self, service_order_id: int, organization_id: int):
        ...

    def update_status(
        self,
        service_order_id: int,
        organization_id: int,
        status: str,
        scheduled_date: datetime.datetime | None = None,
        completed_at: datetime.datetime | None = None,
    ):
        ...
