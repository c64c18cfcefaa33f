from django.db.models import Manager

from common.exceptions import OrganizationRequiredError
from organizations.querysets import BaseOrganizationModelQuerySet


class BaseOrganizationModelManager(Manager.from_queryset(BaseOrganizationModelQuerySet)):  # type: ignore
    """
    Base manager for organization owned models.
    This manager can be extended by other organization models.
    """

    def create(self, **kwargs):
        """
        Override the create method to ensure the organization is always set.
        """
        if "organization_id" not in kwargs and "organization" not in kwargs:
            raise OrganizationRequiredError()
        return super().create(**kwargs)
